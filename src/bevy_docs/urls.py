from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import ParseResult, urlparse, urlunparse

CRATE_ROOT_URL = "https://docs.rs/bevy/latest/bevy/"
SEARCH_URL_TEMPLATE = CRATE_ROOT_URL + "?search={keyword}"


def build_search_url(keyword: str) -> str:
    """Substitute ``keyword`` into the search template.

    The keyword is inserted verbatim (surrounding whitespace aside); no
    percent-encoding is applied here.
    """

    keyword = (keyword or "").strip()
    if not keyword:
        raise ValueError("keyword must not be empty")
    return SEARCH_URL_TEMPLATE.format(keyword=keyword)


def normalize_url(raw_url: str) -> str:
    """Normalize a URL before fetching.

    - Lowercases scheme + hostname.
    - Strips fragments.
    """

    parsed: ParseResult = urlparse(raw_url)
    parsed = parsed._replace(
        scheme=(parsed.scheme or "").lower(),
        netloc=(parsed.netloc or "").lower(),
        fragment="",
    )
    return urlunparse(parsed)


@dataclass(frozen=True)
class DocsScope:
    host: str
    path_prefix: str

    def is_allowed(self, url: str) -> bool:
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        if (parsed.scheme or "").lower() != "https":
            return False
        if (parsed.hostname or "").lower() != self.host.lower():
            return False
        prefix = self.path_prefix.rstrip("/")
        path = parsed.path or "/"
        # Dot segments are resolved by requests before sending.
        if any(seg in {".", ".."} for seg in path.split("/")):
            return False
        return path == prefix or path.startswith(prefix + "/")


BEVY_SCOPE = DocsScope(host="docs.rs", path_prefix="/bevy/latest")
