# src/main.py - v2
"""CLI entry point: inspect and maintain the local search cache.

Usage:
    searchcache stats
    searchcache sweep
    searchcache clear-cache
    searchcache history [--clear | --remove QUERY]
    searchcache search QUERY [--filter key=value ...]
    searchcache suggest QUERY
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from searchcache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="searchcache",
        description=f"searchcache v{__version__}: local search cache and history",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_stats = subparsers.add_parser("stats", help="Show cache and history footprint")
    p_stats.set_defaults(func=_cmd_stats)

    p_sweep = subparsers.add_parser("sweep", help="Delete expired cache entries")
    p_sweep.set_defaults(func=_cmd_sweep)

    p_clear = subparsers.add_parser("clear-cache", help="Drop every cached result page")
    p_clear.set_defaults(func=_cmd_clear_cache)

    p_history = subparsers.add_parser("history", help="List or edit recent searches")
    group = p_history.add_mutually_exclusive_group()
    group.add_argument("--clear", action="store_true", help="Empty the history")
    group.add_argument("--remove", metavar="QUERY", default=None, help="Remove one entry")
    p_history.set_defaults(func=_cmd_history)

    p_search = subparsers.add_parser("search", help="Run a search through the cache")
    p_search.add_argument("query", help="Search term")
    p_search.add_argument(
        "-f", "--filter", action="append", default=[], metavar="KEY=VALUE",
        help="Filter to apply (repeatable), e.g. city=Douala",
    )
    p_search.set_defaults(func=_cmd_search)

    p_suggest = subparsers.add_parser("suggest", help="Fetch typeahead suggestions")
    p_suggest.add_argument("query", help="Partial search term")
    p_suggest.set_defaults(func=_cmd_suggest)

    return parser


async def _cmd_stats(args: argparse.Namespace) -> int:
    """Display cache and history statistics."""
    from searchcache.api.facade import build_context

    ctx = build_context(with_client=False)
    try:
        stats = await ctx.get_stats()
    finally:
        await ctx.aclose()

    print("\nSearch cache:")
    print(f"  Cached searches:  {stats.total_cached_searches}")
    print(f"  Recent searches:  {stats.recent_searches_count}")
    print(f"  Cache size:       {stats.cache_size}")
    return 0


async def _cmd_sweep(args: argparse.Namespace) -> int:
    from searchcache.api.facade import build_context

    ctx = build_context(with_client=False)
    try:
        removed = await ctx.result_cache.clean_expired()
    finally:
        await ctx.aclose()
    print(f"Removed {removed} expired entries")
    return 0


async def _cmd_clear_cache(args: argparse.Namespace) -> int:
    from searchcache.api.facade import build_context

    ctx = build_context(with_client=False)
    try:
        removed = await ctx.result_cache.invalidate_all()
    finally:
        await ctx.aclose()
    print(f"Removed {removed} cached searches")
    return 0


async def _cmd_history(args: argparse.Namespace) -> int:
    """List recent searches, optionally clearing or removing first."""
    from searchcache.api.facade import build_context

    ctx = build_context(with_client=False)
    try:
        if args.clear:
            await ctx.history.clear()
        elif args.remove:
            await ctx.history.remove(args.remove)
        entries = await ctx.history.list()
    finally:
        await ctx.aclose()

    if not entries:
        print("No recent searches")
        return 0
    for entry in entries:
        when = entry.last_searched_at.strftime("%Y-%m-%d %H:%M")
        print(f"  {when}  {entry.result_count:>5}  {entry.query}")
    return 0


async def _cmd_search(args: argparse.Namespace) -> int:
    """Submit a query through a surface so cache and history apply."""
    from searchcache.api.facade import build_context

    try:
        filters = _parse_filters(args.filter)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    ctx = build_context()
    try:
        surface = ctx.create_surface("cli", filters=filters)
        await surface.on_submit(args.query)
        state = surface.state
    finally:
        await ctx.aclose()

    if state.error:
        print(f"Search failed: {state.error}")
        return 1

    source = state.last_outcome.value if state.last_outcome else "unknown"
    print(f"\n{len(state.results)} results for \"{args.query}\" ({source})")
    if state.result_meta and state.result_meta.total_results is not None:
        print(f"  Total results: {state.result_meta.total_results}")
    for item in state.results[:10]:
        label = item.get("name") or item.get("title") or item.get("id") or item
        print(f"  - {label}")
    return 0


async def _cmd_suggest(args: argparse.Namespace) -> int:
    from searchcache.api.facade import build_context

    ctx = build_context(with_client=True)
    try:
        items = await ctx.client.get_suggestions(args.query, ctx.settings.suggest_limit)
    finally:
        await ctx.aclose()

    for item in items:
        print(f"  [{item.type}] {item.text}")
    return 0


def _parse_filters(pairs: list[str]) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into a filter set."""
    filters: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid filter {pair!r}, expected KEY=VALUE")
        filters[key.strip()] = value.strip()
    return filters


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from settings."""
    from searchcache.config.settings import Settings
    from searchcache.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
