"""Tests for output formatters."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from bunny_todo.utils.ui.formatters import (
    DEFAULT_CATEGORY_ICON,
    format_error,
    format_relative_time,
    format_success,
    get_category_icon,
    get_completion_color,
    get_progress_bar,
    truncate,
)

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


class TestRelativeTime:
    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=10), "just now"),
            (timedelta(minutes=5), "5m ago"),
            (timedelta(hours=3), "3h ago"),
            (timedelta(days=2), "2d ago"),
        ],
    )
    def test_recent(self, delta, expected):
        assert format_relative_time(NOW - delta, now=NOW) == expected

    def test_older_than_a_week_shows_date(self):
        assert format_relative_time(NOW - timedelta(days=10), now=NOW) == "Jun 5"

    def test_parses_iso_strings(self):
        assert format_relative_time("2024-06-15T11:00:00Z", now=NOW) == "1h ago"

    def test_naive_datetimes_are_utc(self):
        assert format_relative_time(datetime(2024, 6, 15, 11, 30), now=NOW) == "30m ago"

    @pytest.mark.parametrize("value", [None, "", "yesterday"])
    def test_invalid_values(self, value):
        assert format_relative_time(value, now=NOW) == ""


class TestIcons:
    def test_known_category(self):
        assert get_category_icon("shopping") == "🛍️"

    def test_unknown_category_gets_default(self):
        assert get_category_icon("chores") == DEFAULT_CATEGORY_ICON == "📌"
        assert get_category_icon(None) == "📌"


class TestHelpers:
    def test_truncate(self):
        assert truncate("short") == "short"
        assert truncate("a" * 25) == "a" * 20 + "..."

    def test_progress_bar(self):
        assert get_progress_bar(0) == "░" * 10
        assert get_progress_bar(25) == "▓▓" + "░" * 8
        assert get_progress_bar(100) == "▓" * 10

    @pytest.mark.parametrize("value,color", [(90, "green"), (50, "yellow"), (10, "red")])
    def test_completion_color(self, value, color):
        assert get_completion_color(value) == color


def test_message_prefixes(capsys):
    format_error("Something broke")
    format_success("All good")
    out = capsys.readouterr().out
    assert "Error: Something broke" in out
    assert "Success: All good" in out
