from __future__ import annotations

import argparse
import json
import sys

from .lookup import (
    DEFAULT_USER_AGENT,
    NOT_FOUND_MESSAGE,
    DocsLookup,
    DocumentationNotFound,
    LookupConfig,
    build_lookup,
    render_json,
    render_text,
)
from .urls import build_search_url


def _positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return n


def _non_negative_int(value: str) -> int:
    n = int(value)
    if n < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return n


def _add_common_fetch_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("keyword", help="API term to look up, e.g. Transform")
    p.add_argument("--timeout", type=_positive_int, default=30)
    p.add_argument("--max-retries", type=_non_negative_int, default=2)
    p.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    p.add_argument("--json", action="store_true", help="Print JSON to stdout")
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Print fetched URLs to stderr",
    )


def _config_from_args(args: argparse.Namespace) -> LookupConfig:
    return LookupConfig(
        timeout_s=int(args.timeout),
        max_retries=int(args.max_retries),
        user_agent=str(args.user_agent),
    )


def _report_fetches(lookup: DocsLookup, *, verbose: bool) -> None:
    if not verbose:
        return
    for url in lookup.fetched_urls:
        print(f"bevy-docs: fetched {url}", file=sys.stderr)


def _run_lookup(args: argparse.Namespace) -> int:
    lookup = build_lookup(_config_from_args(args))
    try:
        result = lookup.lookup(args.keyword)
    except DocumentationNotFound as e:
        _report_fetches(lookup, verbose=bool(args.verbose))
        if bool(args.verbose):
            print(f"bevy-docs: {e}", file=sys.stderr)
        print(NOT_FOUND_MESSAGE)
        return 1
    finally:
        lookup.http.close()

    _report_fetches(lookup, verbose=bool(args.verbose))
    if bool(args.json):
        sys.stdout.write(render_json(result))
    else:
        sys.stdout.write(render_text(result))
    return 0


def _run_search(args: argparse.Namespace) -> int:
    lookup = build_lookup(_config_from_args(args))
    try:
        search_url, ranked = lookup.search(args.keyword)
    except DocumentationNotFound as e:
        _report_fetches(lookup, verbose=bool(args.verbose))
        if bool(args.verbose):
            print(f"bevy-docs: {e}", file=sys.stderr)
        print(NOT_FOUND_MESSAGE)
        return 1
    finally:
        lookup.http.close()

    _report_fetches(lookup, verbose=bool(args.verbose))
    if not ranked:
        print(NOT_FOUND_MESSAGE)
        return 1

    ranked = ranked[: int(args.limit)]
    if bool(args.json):
        payload = {
            "keyword": args.keyword,
            "search_url": search_url,
            "hits": [
                {"path": h.path, "kind": h.kind, "url": h.url} for h in ranked
            ],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for hit in ranked:
            print(f"{hit.kind:<8} {hit.path}  {hit.url}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="bevy-docs")
    sub = parser.add_subparsers(dest="cmd", required=True)

    lookup_p = sub.add_parser(
        "lookup",
        help="Print the definition and an example for a Bevy API item",
    )
    _add_common_fetch_args(lookup_p)

    search_p = sub.add_parser(
        "search",
        help="List ranked candidate items for a keyword",
    )
    _add_common_fetch_args(search_p)
    search_p.add_argument("--limit", type=_positive_int, default=10)

    url_p = sub.add_parser("url", help="Print the docs.rs search URL")
    url_p.add_argument("keyword")

    args = parser.parse_args(argv)

    if args.cmd == "url":
        try:
            print(build_search_url(args.keyword))
        except ValueError as e:
            print(f"bevy-docs: {e}", file=sys.stderr)
            return 2
        return 0

    if not str(args.keyword).strip():
        print("bevy-docs: keyword must not be empty", file=sys.stderr)
        return 2

    if args.cmd == "lookup":
        return _run_lookup(args)

    if args.cmd == "search":
        return _run_search(args)

    return 2
