"""Tests for duration formatting helpers."""

from __future__ import annotations

from tagsniff.utils.time_format import UNKNOWN_DURATION, format_duration


def test_format_duration_under_hour() -> None:
    assert format_duration(10.0) == "00:10.0"
    assert format_duration(0.26) == "00:00.3"
    assert format_duration(61.04) == "01:01.0"
    assert format_duration(3599.9) == "59:59.9"


def test_format_duration_at_hour_and_beyond() -> None:
    assert format_duration(3600) == "1:00:00.0"
    assert format_duration(36_000.5) == "10:00:00.5"


def test_format_duration_unknown_values() -> None:
    assert format_duration(None) == UNKNOWN_DURATION
    assert format_duration(0) == UNKNOWN_DURATION
    assert format_duration(-5) == UNKNOWN_DURATION
    assert format_duration(float("nan")) == UNKNOWN_DURATION
    assert format_duration(float("inf")) == UNKNOWN_DURATION
