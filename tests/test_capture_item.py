#!/usr/bin/env python3
"""
Unit tests for CaptureItem and preview derivation.
"""
from datetime import datetime, timedelta, timezone

import pytest

from lanclip.capture_item import CaptureItem, make_preview, utc_now
from lanclip.constants import PREVIEW_LENGTH, PREVIEW_SUFFIX


def test_make_preview_short_content_unchanged() -> None:
    """Test content up to the preview length is its own preview."""
    assert make_preview("hello") == "hello"


def test_make_preview_at_limit_unchanged() -> None:
    """Test content of exactly PREVIEW_LENGTH characters is not truncated."""
    content = "x" * PREVIEW_LENGTH
    assert make_preview(content) == content


def test_make_preview_truncates_long_content() -> None:
    """Test long content is cut to PREVIEW_LENGTH characters plus the marker."""
    content = "a" * 150
    assert make_preview(content) == "a" * PREVIEW_LENGTH + PREVIEW_SUFFIX


def test_item_preview_derived_from_content() -> None:
    """Test an item's preview is computed from its content."""
    item = CaptureItem("b" * 120, utc_now())
    assert item.preview == "b" * 100 + "..."


def test_item_defaults_to_zero_clicks() -> None:
    """Test click_count defaults to zero."""
    assert CaptureItem("x", utc_now()).click_count == 0


def test_item_naive_timestamp_treated_as_utc() -> None:
    """Test a naive capture time is interpreted as UTC."""
    item = CaptureItem("x", datetime(2024, 1, 1, 8, 30))
    assert item.captured_at == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)


def test_item_aware_timestamp_converted_to_utc() -> None:
    """Test a capture time with a non-UTC offset is normalized to UTC."""
    plus_two = timezone(timedelta(hours=2))
    item = CaptureItem("x", datetime(2024, 1, 1, 10, 30, tzinfo=plus_two))
    assert item.captured_at.utcoffset() == timedelta(0)
    assert item.captured_at == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)
    assert item.captured_at.isoformat() == "2024-01-01T08:30:00+00:00"


def test_item_negative_click_count_rejected() -> None:
    """Test a negative click count raises ValueError."""
    with pytest.raises(ValueError, match="non-negative"):
        CaptureItem("x", utc_now(), -1)


def test_clicked_increments_and_keeps_fields() -> None:
    """Test clicked() returns a copy with one more click."""
    item = CaptureItem("x" * 200, utc_now(), 2)
    clicked = item.clicked()
    assert clicked.click_count == 3
    assert clicked.content == item.content
    assert clicked.captured_at == item.captured_at
    assert clicked.preview == item.preview
    assert item.click_count == 2
