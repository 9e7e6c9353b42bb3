"""
Tests for utils.py.
"""

from __future__ import annotations

import pytest

from sitecorpus.utils import (
    ProgressTracker,
    base_name_from_url,
    canonical_url,
    clean_text,
    extract_hostname,
    is_valid_url,
)


@pytest.mark.parametrize("url,expected", [
    ("https://example.com/docs?x=1#top", "https://example.com/docs"),
    ("HTTPS://Example.COM/Docs", "https://example.com/Docs"),
    ("https://example.com", "https://example.com/"),
    ("http://example.com:80/a", "http://example.com/a"),
    ("https://example.com:8443/a", "https://example.com:8443/a"),
    ("mailto:someone@example.com", None),
    ("ftp://example.com/file", None),
    ("", None),
])
def test_canonical_url(url, expected):
    assert canonical_url(url) == expected


def test_extract_hostname():
    assert extract_hostname("https://Docs.Example.com:8080/x") == "docs.example.com"
    assert extract_hostname("not a url") == ""


@pytest.mark.parametrize("url,valid", [
    ("https://example.com", True),
    ("http://example.com/a", True),
    ("example.com", False),
    ("ftp://example.com", False),
    ("https://", False),
])
def test_is_valid_url(url, valid):
    assert is_valid_url(url) is valid


def test_clean_text():
    assert clean_text("  a \n\t b  ") == "a b"
    assert clean_text("") == ""
    assert clean_text(None) == ""


def test_base_name_from_url():
    assert base_name_from_url("https://docs.example.com") == "docs_example_com"
    assert base_name_from_url("https://example.com/guide/start/") == "example_com_guide_start"


def test_progress_tracker_stats():
    tracker = ProgressTracker()
    tracker.start()
    tracker.increment_accepted()
    tracker.increment_accepted()
    tracker.increment_failed()
    tracker.increment_thin()
    tracker.finish()

    stats = tracker.get_stats()
    assert stats["pages_accepted"] == 2
    assert stats["pages_fetched"] == 3
    assert stats["stop_reason"] == "completed"
    assert stats["elapsed_time"] >= 0


def test_elapsed_time_before_start():
    assert ProgressTracker().elapsed_time == 0
