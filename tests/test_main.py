"""
Tests for the command line entry point.
"""

import logging

import pytest

import main
from frontier_crawler.crawler.scheduler import CrawlerScheduler

from tests.helpers import FakeFetcher, links_page


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path, monkeypatch):
    """Run in a temp dir and restore root logging afterwards."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_parser_defaults():
    args = main.build_parser().parse_args(["-s", "https://a.test/"])
    assert args.starting_url == "https://a.test/"
    assert args.max_links is None
    assert args.worker_count is None
    assert args.log_status is None


def test_invalid_starting_url_exits_non_zero(capsys):
    assert main.main(["-s", "not a url"]) == 1


def test_missing_starting_url_exits_non_zero(capsys):
    assert main.main([]) == 1
    assert "starting URL is required" in capsys.readouterr().err


def test_invalid_config_exits_non_zero(capsys):
    assert main.main(["-s", "https://a.test/", "-n", "0"]) == 1


def test_prints_visited_set(monkeypatch, capsys):
    pages = {"https://a.test/": links_page("/p1"), "https://a.test/p1": links_page()}
    original_init = CrawlerScheduler.__init__

    def init_with_fake(self, config, fetcher=None, **kwargs):
        original_init(self, config, fetcher=FakeFetcher(pages=pages), **kwargs)

    monkeypatch.setattr(CrawlerScheduler, "__init__", init_with_fake)

    assert main.main(["-s", "https://a.test/", "-m", "10", "-n", "2"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[-2:] == ["https://a.test/", "https://a.test/p1"]
