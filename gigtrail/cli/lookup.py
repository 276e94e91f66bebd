# =============================================================================
# gigtrail/cli/lookup.py - CLI Lookup Command
# =============================================================================
#
# Answers "has ARTIST performed in COUNTRY?" from the command line using the
# same providers and aggregator as the HTTP server, without starting it.
#
# Typical usage:
#   python -m gigtrail.cli lookup Coldplay --country Brazil   # Markdown digest
#   python -m gigtrail.cli lookup "Taylor Swift" --json       # PerformanceResult JSON
#   python -m gigtrail.cli lookup Radiohead --summary         # One-line summary
#
# Output modes:
#   - Digest (default): top 5 events with their sources, "... and N more",
#     then up to 3 additional source links
#   - JSON (--json): the full PerformanceResult
#   - Summary (--summary): the one-line text served by /api/summary
#
# --json and --quiet lower the log level to WARNING before gigtrail.main is
# imported, so stdout carries only the lookup output.
# =============================================================================

"""Command-line performance lookup.

Usage::

    python -m gigtrail.cli lookup ARTIST [--country C] [--json] [--summary]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from gigtrail.models.performance import WORLDWIDE, PerformanceResult

_TOP_EVENTS = 5
_TOP_SOURCES = 3


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_digest(result: PerformanceResult) -> str:
    """Render *result* as the Markdown digest used by tool integrations."""
    lines: list[str] = []

    if not result.performed:
        lines.append("❌ **No performance records found**")
        lines.append("")
        where = f" in {result.location}" if result.location != WORLDWIDE else ""
        lines.append(result.message or f"Could not find performances for {result.artist}{where}.")
        return "\n".join(lines) + "\n"

    lines.append(f"✅ **Yes, {result.artist} has performed in {result.location}**")
    lines.append("")
    lines.append(f"Found {len(result.events)} performance(s):")
    lines.append("")

    for idx, event in enumerate(result.events[:_TOP_EVENTS], start=1):
        lines.append(
            f"{idx}. **{event.date}** - {event.venue}, {event.city}, {event.country}"
        )
        lines.append(f"   Source: {event.source} - {event.source_url}")
        lines.append("")

    remaining = len(result.events) - _TOP_EVENTS
    if remaining > 0:
        lines.append(f"... and {remaining} more events")
        lines.append("")

    if result.sources:
        lines.append("**Additional sources:**")
        for idx, source in enumerate(result.sources[:_TOP_SOURCES], start=1):
            line = f"{idx}. [{source.title}]({source.url})"
            if source.published_date:
                line += f" ({source.published_date})"
            lines.append(line)

    return "\n".join(lines).rstrip() + "\n"


def _quiet_logs() -> None:
    """Lower every logger to WARNING before ``gigtrail.main`` configures them."""
    os.environ["LOG_LEVEL"] = "WARNING"
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def _run(artist: str, country: str | None, json_output: bool, summary: bool) -> int:
    # Deferred import: gigtrail.main reads settings and configures logging
    # at import time.
    from gigtrail.main import build_components
    from gigtrail.models.performance import SearchParams

    components = build_components()
    aggregator = components["aggregator"]
    try:
        if summary:
            print(await aggregator.summarize(artist, country))
            return 0

        result = await aggregator.aggregate(SearchParams(artist=artist, country=country))
        if json_output:
            print(result.model_dump_json(indent=2))
        else:
            print(format_digest(result), end="")
        return 0
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m gigtrail.cli",
        description="Look up whether an artist has performed in a country.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup = subparsers.add_parser("lookup", help="Aggregate performances for an artist.")
    lookup.add_argument("artist", type=str, help="Artist or band name.")
    lookup.add_argument(
        "--country", "-c",
        type=str,
        default=None,
        help="Country name or ISO code (default: worldwide).",
    )
    mode = lookup.add_mutually_exclusive_group()
    mode.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the full result as JSON.",
    )
    mode.add_argument(
        "--summary",
        action="store_true",
        help="Print the one-line summary only.",
    )
    lookup.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress log output below WARNING.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the lookup, and return the exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.artist.strip():
        print("Error: artist name must not be blank", file=sys.stderr)
        return 2

    if args.quiet or args.json_output:
        _quiet_logs()

    return asyncio.run(_run(args.artist, args.country, args.json_output, args.summary))


if __name__ == "__main__":
    sys.exit(main())
