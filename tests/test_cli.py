"""
Tests for the command-line front end, with the crawl itself replaced.
"""

from __future__ import annotations

import json

import pytest

import sitecorpus.__main__ as cli
from sitecorpus.crawler import CrawlPage, CrawlResult
from sitecorpus.errors import FetchFailed


def fake_result() -> CrawlResult:
    return CrawlResult(
        title="Example",
        pages=[CrawlPage(url="https://example.com/", content="# Example\n\nHello there")],
        content="--- https://example.com/ ---\n# Example\n\nHello there",
        pages_count=1,
        stats={"pages_failed": 0, "pages_thin": 0, "elapsed_time": 0.1, "stop_reason": "completed"},
    )


@pytest.fixture
def captured(monkeypatch, tmp_path):
    """Replace crawl_site and run inside a temp directory."""
    calls = []

    async def fake_crawl_site(url, max_pages=None, on_progress=None, config=None):
        calls.append({"url": url, "max_pages": max_pages, "config": config})
        on_progress(1, max_pages)
        return fake_result()

    monkeypatch.setattr(cli, "crawl_site", fake_crawl_site)
    monkeypatch.chdir(tmp_path)
    for name in ("SITECORPUS_MAX_PAGES", "SITECORPUS_PAGE_DELAY"):
        monkeypatch.delenv(name, raising=False)
    return calls


def test_default_json_export(captured, tmp_path, capsys):
    assert cli.run_cli_with_args(["example.com"]) == 0

    assert captured[0]["url"] == "https://example.com"
    assert captured[0]["max_pages"] == 5
    data = json.loads((tmp_path / "example_com.json").read_text(encoding="utf-8"))
    assert data["title"] == "Example"

    out = capsys.readouterr().out
    assert "[Page 1/5]" in out
    assert "CRAWL COMPLETE" in out


def test_flags_reach_config(captured, tmp_path):
    code = cli.run_cli_with_args([
        "https://example.com", "--pages", "9", "--delay", "0", "--explore-thin-pages",
        "--cookie", "session=abc", "--output-csv", str(tmp_path / "out.csv"),
    ])
    assert code == 0

    cfg = captured[0]["config"]
    assert captured[0]["max_pages"] == 9
    assert cfg.page_delay == 0
    assert cfg.explore_thin_pages is True
    assert cfg.cookies == {"session": "abc"}
    assert (tmp_path / "out.csv").exists()
    assert not (tmp_path / "example_com.json").exists()


def test_store_option(captured, tmp_path):
    store_path = tmp_path / "sites.json"
    assert cli.run_cli_with_args(["https://example.com", "--store", str(store_path)]) == 0

    data = json.loads(store_path.read_text(encoding="utf-8"))
    assert data["site:example.com"]["pages_count"] == 1


def test_invalid_config_exits_with_usage_error(captured, capsys):
    assert cli.run_cli_with_args(["https://example.com", "--pages", "0"]) == 2
    assert "max_pages" in capsys.readouterr().err
    assert captured == []


def test_environment_defaults_applied(captured, monkeypatch):
    monkeypatch.setenv("SITECORPUS_MAX_PAGES", "7")
    assert cli.run_cli_with_args(["https://example.com"]) == 0
    assert captured[0]["max_pages"] == 7


def test_seed_failure_returns_error(monkeypatch, tmp_path):
    async def failing_crawl_site(url, max_pages=None, on_progress=None, config=None):
        raise FetchFailed(url, "HTTP 503", status=503)

    monkeypatch.setattr(cli, "crawl_site", failing_crawl_site)
    monkeypatch.chdir(tmp_path)
    assert cli.run_cli_with_args(["https://example.com"]) == 1
    assert not (tmp_path / "example_com.json").exists()


def test_unwritable_export_path_returns_error(captured, tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    code = cli.run_cli_with_args([
        "https://example.com", "--output-json", str(blocker / "out.json"),
    ])
    assert code == 1


def test_corrupt_store_returns_error(captured, tmp_path):
    store_path = tmp_path / "sites.json"
    store_path.write_text("{broken", encoding="utf-8")
    assert cli.run_cli_with_args(["https://example.com", "--store", str(store_path)]) == 1
