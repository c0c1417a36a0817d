from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from markdownify import markdownify as md


class ExtractionError(ValueError):
    pass


@dataclass(frozen=True)
class ItemDoc:
    url: str
    title: str
    definition: str
    example: str | None = None
    summary: str | None = None


_DEFINITION_SELECTORS = (
    "pre.item-decl",
    ".item-decl pre",
    "pre.rust.item-decl",
    "div.docblock.type-decl pre",
)

_TOP_DOCBLOCK_SELECTORS = (
    "details.top-doc > div.docblock",
    "#main-content > details.top-doc div.docblock",
    "#main-content > div.docblock",
    "section#main-content div.docblock",
)


def _clean_soup_inplace(soup: BeautifulSoup) -> None:
    for tag_name in ["script", "style", "noscript"]:
        for t in soup.find_all(tag_name):
            t.decompose()
    # Copy buttons and tooltips render as stray glyphs inside code blocks.
    for t in soup.select("button, .tooltip"):
        t.decompose()


def _code_text(node: Tag) -> str:
    text = node.get_text()
    lines = [ln.rstrip() for ln in text.strip("\n").splitlines()]
    return "\n".join(lines).strip()


def extract_title(soup: BeautifulSoup) -> str:
    h1 = soup.find("h1")
    if h1 and h1.get_text(strip=True):
        return h1.get_text(" ", strip=True)
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(" ", strip=True)
    return "Untitled"


def _pick_definition(soup: BeautifulSoup) -> str | None:
    for selector in _DEFINITION_SELECTORS:
        node = soup.select_one(selector)
        if node and node.get_text(strip=True):
            return _code_text(node)

    # Function pages on some rustdoc versions only carry a code header.
    header = soup.select_one("h4.code-header, .code-header")
    if header and header.get_text(strip=True):
        return header.get_text(" ", strip=True)
    return None


def _pick_top_docblock(soup: BeautifulSoup) -> Tag | None:
    for selector in _TOP_DOCBLOCK_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            return node

    for node in soup.select("div.docblock"):
        classes = node.get("class") or []
        if "item-decl" in classes or "type-decl" in classes:
            continue
        return node
    return None


def _pick_example(docblock: Tag | None) -> str | None:
    if docblock is None:
        return None
    for selector in ["pre.rust", ".example-wrap pre", "pre"]:
        node = docblock.select_one(selector)
        if node and node.get_text(strip=True):
            return _code_text(node)
    return None


def _pick_summary(docblock: Tag | None) -> str | None:
    if docblock is None:
        return None
    para = docblock.find("p")
    if para is None or not para.get_text(strip=True):
        return None
    return md(str(para), heading_style="ATX").strip() or None


def extract_item_doc(html: str, *, url: str) -> ItemDoc:
    """Pull the definition and first example out of a rustdoc item page."""

    soup = BeautifulSoup(html, "html.parser")
    _clean_soup_inplace(soup)

    definition = _pick_definition(soup)
    if not definition:
        raise ExtractionError(f"No item definition found on {url}")

    docblock = _pick_top_docblock(soup)
    return ItemDoc(
        url=url,
        title=extract_title(soup),
        definition=definition,
        example=_pick_example(docblock),
        summary=_pick_summary(docblock),
    )
