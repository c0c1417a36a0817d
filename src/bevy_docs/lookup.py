from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field

import requests

from . import __version__
from .content import is_html
from .extract import ExtractionError, ItemDoc, extract_item_doc
from .http_client import FetchError, FetchResult, HttpClient, OutOfScopeError
from .search import (
    SearchHit,
    index_url_for,
    parse_search_results,
    pick_best,
    rank_hits,
)
from .urls import build_search_url

NOT_FOUND_MESSAGE = "Documentation not found."

DEFAULT_USER_AGENT = f"bevy-docs/{__version__} (+https://docs.rs/bevy/latest)"


class DocumentationNotFound(LookupError):
    def __init__(self, keyword: str, reason: str) -> None:
        super().__init__(f"{keyword}: {reason}")
        self.keyword = keyword
        self.reason = reason


@dataclass
class LookupConfig:
    timeout_s: int = 30
    max_retries: int = 2
    backoff_base_s: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class LookupResult:
    keyword: str
    search_url: str
    hit: SearchHit
    doc: ItemDoc


@dataclass
class DocsLookup:
    http: HttpClient
    fetched_urls: list[str] = field(default_factory=list)

    def _fetch_page(self, keyword: str, url: str) -> FetchResult:
        self.fetched_urls.append(url)
        try:
            res = self.http.get(url)
        except (FetchError, OutOfScopeError) as e:
            raise DocumentationNotFound(keyword, str(e)) from e
        if not res.ok:
            raise DocumentationNotFound(
                keyword, f"{res.final_url} returned HTTP {res.status_code}"
            )
        if not is_html(res.content_type, res.body):
            raise DocumentationNotFound(keyword, f"{res.final_url} is not HTML")
        return res

    def search(self, keyword: str) -> tuple[str, list[SearchHit]]:
        """Return the search URL and the ranked hits for ``keyword``."""

        search_url = build_search_url(keyword)
        page = self._fetch_page(keyword, search_url)
        hits = parse_search_results(
            page.text(), page_url=page.final_url, scope=self.http.scope
        )

        # docs.rs renders search results in the browser; the static item
        # index of the same crate stands in for them.
        if not hits:
            index = self._fetch_page(keyword, index_url_for(search_url))
            hits = parse_search_results(
                index.text(), page_url=index.final_url, scope=self.http.scope
            )

        return search_url, rank_hits(keyword, hits)

    def lookup(self, keyword: str) -> LookupResult:
        search_url, ranked = self.search(keyword)
        best = pick_best(keyword, ranked)
        if best is None:
            raise DocumentationNotFound(keyword, "search returned no results")

        page = self._fetch_page(keyword, best.url)
        try:
            doc = extract_item_doc(page.text(), url=page.final_url)
        except ExtractionError as e:
            raise DocumentationNotFound(keyword, str(e)) from e

        return LookupResult(keyword=keyword, search_url=search_url, hit=best, doc=doc)


def build_lookup(
    config: LookupConfig, *, session: requests.Session | None = None
) -> DocsLookup:
    session = session or requests.Session()
    session.headers["User-Agent"] = config.user_agent
    http = HttpClient(
        session,
        timeout_s=config.timeout_s,
        max_retries=config.max_retries,
        backoff_base_s=config.backoff_base_s,
    )
    return DocsLookup(http=http)


def render_text(result: LookupResult) -> str:
    doc = result.doc
    lines = [
        f"# {result.hit.path}",
        "",
        "Definition:",
        "```rust",
        doc.definition,
        "```",
        "",
        "Example:",
    ]
    if doc.example:
        lines.extend(["```rust", doc.example, "```"])
    else:
        lines.append("(no example on this page)")
    lines.extend(["", f"Source: {doc.url}"])
    return "\n".join(lines) + "\n"


def render_json(result: LookupResult) -> str:
    payload = {
        "keyword": result.keyword,
        "search_url": result.search_url,
        "path": result.hit.path,
        "kind": result.hit.kind,
        **asdict(result.doc),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def lookup_or_message(lookup: DocsLookup, keyword: str) -> str:
    """Render the lookup, or exactly ``NOT_FOUND_MESSAGE`` on any failure."""

    try:
        return render_text(lookup.lookup(keyword))
    except DocumentationNotFound:
        return NOT_FOUND_MESSAGE
