"""Unit tests for the gigtrail.cli.lookup command."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gigtrail.cli.lookup import _build_parser, format_digest, main
from gigtrail.models.performance import PerformanceResult, SourceKind, SourceLink
from tests.conftest import make_event


def _result(n_events: int, n_sources: int = 0, **overrides) -> PerformanceResult:
    events = [
        make_event(date=f"2023-06-{day:02d}", venue=f"Venue {day}", source_url=f"https://s/{day}")
        for day in range(n_events, 0, -1)
    ]
    sources = [
        SourceLink(
            title=f"Story {i}",
            url=f"https://news.example/{i}",
            type=SourceKind.NEWS,
            published_date="2023-07-01" if i == 0 else None,
        )
        for i in range(n_sources)
    ]
    values = {
        "artist": "Coldplay",
        "location": "United States",
        "performed": n_events > 0,
        "events": events,
        "sources": sources,
    }
    values.update(overrides)
    return PerformanceResult(**values)


# ======================================================================
# format_digest
# ======================================================================


class TestFormatDigest:
    def test_lists_top_five_events(self) -> None:
        text = format_digest(_result(7))

        assert text.startswith("✅ **Yes, Coldplay has performed in United States**")
        assert "Found 7 performance(s):" in text
        assert "1. **2023-06-07** - Venue 7, New York, United States" in text
        assert "   Source: Setlist.fm - https://s/7" in text
        assert "5. **2023-06-03**" in text
        assert "6. **" not in text
        assert "... and 2 more events" in text
        assert text.endswith("\n")

    def test_no_more_line_for_short_lists(self) -> None:
        assert "more events" not in format_digest(_result(5))

    def test_additional_sources_capped_at_three(self) -> None:
        text = format_digest(_result(1, n_sources=5))

        assert "**Additional sources:**" in text
        assert "1. [Story 0](https://news.example/0) (2023-07-01)" in text
        assert "3. [Story 2](https://news.example/2)" in text
        assert "Story 3" not in text

    def test_not_performed_uses_message(self) -> None:
        text = format_digest(_result(0, message="No performances found. Some services had errors: X: y"))

        assert text.startswith("❌ **No performance records found**")
        assert text.endswith("Some services had errors: X: y\n")

    def test_not_performed_default_text(self) -> None:
        text = format_digest(_result(0, location="worldwide"))
        assert text.endswith("Could not find performances for Coldplay.\n")


# ======================================================================
# Argument parsing / entry point
# ======================================================================


class TestLookupCommand:
    def test_parser_defaults(self) -> None:
        args = _build_parser().parse_args(["lookup", "Coldplay"])

        assert args.command == "lookup"
        assert args.artist == "Coldplay"
        assert args.country is None
        assert args.json_output is False
        assert args.summary is False

    def test_parser_flags(self) -> None:
        args = _build_parser().parse_args(["lookup", "Muse", "-c", "Brazil", "--json", "-q"])

        assert args.country == "Brazil"
        assert args.json_output is True
        assert args.quiet is True

    def test_json_and_summary_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["lookup", "Muse", "--json", "--summary"])

    def test_blank_artist_exits_with_usage_error(self, capsys) -> None:
        assert main(["lookup", "   "]) == 2
        assert "must not be blank" in capsys.readouterr().err

    def test_summary_mode_prints_line(self, capsys) -> None:
        aggregator = MagicMock()
        aggregator.summarize = AsyncMock(return_value="Yes, Muse has performed in Brazil.")
        client = MagicMock()
        client.aclose = AsyncMock()
        components = {"aggregator": aggregator, "http_client": client}

        with patch("gigtrail.main.build_components", return_value=components):
            code = main(["lookup", "Muse", "--country", "Brazil", "--summary"])

        assert code == 0
        assert capsys.readouterr().out == "Yes, Muse has performed in Brazil.\n"
        aggregator.summarize.assert_awaited_once_with("Muse", "Brazil")
        client.aclose.assert_awaited_once()
