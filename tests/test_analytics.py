"""Tests for analytics formatting helpers."""

from datetime import datetime

import pytest

from ragdoll_cli.analytics import format_metric_name, format_metric_value, format_time, resolve_cleanup_dry_run


def test_format_metric_name():
    assert format_metric_name("avg_execution_time") == "Avg Execution Time"
    assert format_metric_name("total_searches") == "Total Searches"


def test_format_metric_value():
    assert format_metric_value("avg_execution_time", 12.5) == "12.5ms"
    assert format_metric_value("avg_click_through_rate", 40) == "40%"
    assert format_metric_value("search_types", {"semantic": 3, "hybrid": 1}) == "semantic: 3, hybrid: 1"
    assert format_metric_value("search_types", {}) == "-"
    assert format_metric_value("total_searches", 7) == "7"


def test_format_time():
    assert format_time("2026-03-01T09:05:00+00:00") == "03/01 09:05"
    assert format_time("2026-03-01T09:05:00Z") == "03/01 09:05"
    assert format_time(datetime(2026, 12, 24, 18, 30)) == "12/24 18:30"
    assert format_time(None) == "N/A"
    assert format_time("yesterday") == "N/A"


@pytest.mark.parametrize(
    "dry_run, force, expected",
    [(True, False, True), (True, True, False), (False, False, False)],
)
def test_resolve_cleanup_dry_run(dry_run, force, expected):
    assert resolve_cleanup_dry_run(dry_run, force) is expected
