"""
digitalux — entry point.

Usage:
    python -m digitalux serve                   # start web server on :8000
    python -m digitalux serve --port 3000
    python -m digitalux search and              # ranked sidebar results for "and"
    python -m digitalux search --spotlight      # idle spotlight listing
    python -m digitalux shortcuts               # effective key bindings
    python -m digitalux shortcuts --reset       # drop all saved overrides
"""

from __future__ import annotations

import argparse
import logging
import sys

from digitalux.config import load_settings


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="digitalux", description="Component search and keyboard shortcut configuration")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    sv = sub.add_parser("serve", help="Start the web server")
    sv.add_argument("--host", default="127.0.0.1", help="Host to bind")
    sv.add_argument("--port", type=int, default=8000, help="Port to bind")

    se = sub.add_parser("search", help="Print ranked search results for a query")
    se.add_argument("query", nargs="?", default="", help="Search text")
    se.add_argument("--spotlight", action="store_true", help="Use the spotlight variant (lists entries when idle)")

    sh = sub.add_parser("shortcuts", help="List effective keyboard shortcuts")
    sh.add_argument("--reset", action="store_true", help="Reset every shortcut to its default and save")

    return p


def _search(query: str, spotlight: bool) -> int:
    from digitalux.catalog import CatalogError, IndexHolder, build_index, load_catalog
    from digitalux.search import SearchConfig, SearchSession

    settings = load_settings()
    try:
        holder = IndexHolder(build_index(load_catalog(settings.catalog_path, settings.language)))
    except CatalogError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    config = SearchConfig.spotlight(settings) if spotlight else SearchConfig.sidebar(settings)
    session = SearchSession(holder, config)
    session.on_query_changed(query)
    if not session.results:
        print("No results.")
        return 0
    for i, match in enumerate(session.results):
        marker = ">" if i == session.cursor else " "
        entry = match.entry
        print(f"{marker} {entry.display_name:<28} {entry.category:<16} [{match.tier.name.lower()}]")
    return 0


def _shortcuts(reset: bool) -> int:
    from digitalux.shortcuts import ShortcutSaveError, create_registry

    settings = load_settings()
    registry = create_registry(settings.shortcuts_path)
    if reset:
        try:
            registry.reset_all()
        except ShortcutSaveError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        print("All shortcuts reset to defaults.")
    for entry in registry.entries:
        flag = "*" if entry.is_overridden else " "
        print(f"{flag} {entry.action_id:<24} {entry.current_binding:<14} {entry.description}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "serve":
        from digitalux.web.server import main as serve
        serve(host=args.host, port=args.port)
        return 0
    if args.cmd == "search":
        return _search(args.query, args.spotlight)
    if args.cmd == "shortcuts":
        return _shortcuts(args.reset)
    return 2


if __name__ == "__main__":
    sys.exit(main())
