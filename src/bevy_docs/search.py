from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final, Iterable
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from .urls import BEVY_SCOPE, DocsScope, normalize_url

# Crates that make up the engine core; items re-exported under these
# modules rank right after the prelude.
CORE_MODULES: Final[tuple[str, ...]] = (
    "app",
    "ecs",
    "math",
    "transform",
    "hierarchy",
    "asset",
    "input",
    "time",
    "render",
    "window",
    "core",
)

# rustdoc item files look like "struct.Transform.html"; modules are
# "<name>/index.html".
_ITEM_FILE_RE = re.compile(r"^(?P<kind>[a-z]+)\.(?P<name>[A-Za-z0-9_]+)\.html$")


@dataclass(frozen=True)
class SearchHit:
    path: str
    kind: str
    url: str

    @property
    def name(self) -> str:
        return self.path.rsplit("::", 1)[-1]

    @property
    def module_path(self) -> tuple[str, ...]:
        return tuple(self.path.split("::")[:-1])


def index_url_for(search_url: str) -> str:
    """Return the crate's static item index next to ``search_url``."""

    return urljoin(search_url, "all.html")


def _attr_text(val: object) -> str:
    if isinstance(val, list):
        if not val:
            return ""
        return str(val[0])
    return str(val or "")


def _hit_from_url(url: str, *, scope: DocsScope) -> SearchHit | None:
    """Derive path and kind from a rustdoc URL.

    ``https://docs.rs/bevy/latest/bevy/prelude/struct.Transform.html`` maps
    to ``bevy::prelude::Transform`` of kind ``struct``.
    """

    path = urlparse(url).path
    prefix = scope.path_prefix.rstrip("/") + "/"
    if not path.startswith(prefix):
        return None
    parts = [p for p in path[len(prefix) :].split("/") if p]
    if not parts:
        return None

    leaf = parts[-1]
    if leaf == "index.html":
        if len(parts) < 2:
            return None
        return SearchHit(path="::".join(parts[:-1]), kind="mod", url=url)

    m = _ITEM_FILE_RE.match(leaf)
    if not m:
        return None
    item_path = "::".join(parts[:-1] + [m.group("name")])
    return SearchHit(path=item_path, kind=m.group("kind"), url=url)


def parse_search_results(
    html: str,
    *,
    page_url: str,
    scope: DocsScope = BEVY_SCOPE,
) -> list[SearchHit]:
    """Collect the result links listed on a results page.

    Reads rendered search rows when the page carries them, else the
    ``all.html`` item lists. Out-of-scope links are dropped.
    """

    soup = BeautifulSoup(html, "html.parser")

    anchors = soup.select(".search-results a[href]")
    if not anchors:
        anchors = soup.select("ul.all-items a[href]")

    seen: set[str] = set()
    hits: list[SearchHit] = []
    for a in anchors:
        href = _attr_text(a.get("href")).strip()
        if not href or href.startswith("#"):
            continue
        url = normalize_url(urljoin(page_url, href))
        if url in seen or not scope.is_allowed(url):
            continue
        hit = _hit_from_url(url, scope=scope)
        if hit is None:
            continue
        seen.add(url)
        hits.append(hit)
    return hits


def _match_rank(keyword: str, hit: SearchHit) -> int | None:
    kw = keyword.strip()
    kw_lower = kw.lower()
    name = hit.name
    name_lower = name.lower()

    # Qualified keywords ("prelude::Transform") match on the path tail.
    if "::" in kw:
        path_lower = hit.path.lower()
        if hit.path == kw or hit.path.endswith("::" + kw):
            return 0
        if path_lower == kw_lower or path_lower.endswith("::" + kw_lower):
            return 1
        if kw_lower in path_lower:
            return 4
        return None

    if name == kw:
        return 0
    if name_lower == kw_lower:
        return 1
    if name_lower.startswith(kw_lower):
        return 2
    if kw_lower in name_lower:
        return 3
    if kw_lower in hit.path.lower():
        return 4
    return None


def _module_tier(hit: SearchHit) -> int:
    modules = hit.module_path
    if len(modules) < 2:
        return 2
    top = modules[1]
    if top == "prelude":
        return 0
    if top in CORE_MODULES:
        return 1
    return 2


def rank_hits(keyword: str, hits: Iterable[SearchHit]) -> list[SearchHit]:
    """Order matching hits best-first.

    Match quality first, then prelude before core modules before the rest,
    then the shorter module path. Ties keep listing order.
    """

    scored: list[tuple[tuple[int, int, int, int], SearchHit]] = []
    for position, hit in enumerate(hits):
        match = _match_rank(keyword, hit)
        if match is None:
            continue
        key = (match, _module_tier(hit), len(hit.module_path), position)
        scored.append((key, hit))
    scored.sort(key=lambda pair: pair[0])
    return [hit for _, hit in scored]


def pick_best(keyword: str, hits: Iterable[SearchHit]) -> SearchHit | None:
    ranked = rank_hits(keyword, hits)
    return ranked[0] if ranked else None
