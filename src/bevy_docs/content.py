from __future__ import annotations

_HTML_CONTENT_TYPES = {"text/html", "application/xhtml+xml"}


def looks_like_html(data: bytes) -> bool:
    head = data[:2048].lstrip().lower()
    return head.startswith(b"<") and (
        b"<html" in head or b"<!doctype" in head or b"<head" in head
    )


def is_html(content_type: str | None, body: bytes) -> bool:
    """Decide whether a response body is an HTML page.

    A declared content type wins; without one, sniff the body.
    """

    if content_type:
        ct = content_type.split(";", 1)[0].strip().lower()
        if ct in _HTML_CONTENT_TYPES:
            return True
        if ct not in {"", "application/octet-stream"}:
            return False
    return looks_like_html(body)
