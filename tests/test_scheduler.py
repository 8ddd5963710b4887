"""
End-to-end tests for the crawl coordinator.
"""

import asyncio

import pytest

from frontier_crawler.crawler.scheduler import CrawlerScheduler
from frontier_crawler.utils.errors import ConfigurationError, InvalidStartingUrlError

from tests.helpers import FakeFetcher, links_page


SEED = "https://a.test/"


def _run(config, fetcher, *args, **kwargs):
    scheduler = CrawlerScheduler(config, fetcher=fetcher)

    async def scenario():
        return await asyncio.wait_for(scheduler.run(*args, **kwargs), timeout=10)

    return scheduler, asyncio.run(scenario())


def test_back_link_scenario(test_config):
    fetcher = FakeFetcher(pages={
        SEED: links_page("/p1"),
        "https://a.test/p1": links_page("https://a.test/", "/p2"),
    })

    _, visited = _run(test_config, fetcher, SEED, worker_count=1, max_links=2)

    assert {"https://a.test/", "https://a.test/p1"} <= visited
    assert visited <= {"https://a.test/", "https://a.test/p1", "https://a.test/p2"}
    assert fetcher.requests.count(SEED) == 1


def test_fetch_failures_are_contained(test_config):
    fetcher = FakeFetcher(
        pages={
            SEED: links_page("/broken", "/slow", "/good"),
            "https://a.test/good": links_page("/deeper"),
            "https://a.test/deeper": links_page(),
        },
        errors={
            "https://a.test/broken": 500,
            "https://a.test/slow": "Request timeout",
        }
    )

    scheduler, visited = _run(test_config, fetcher, SEED, worker_count=3, max_links=50)

    assert visited == {
        SEED,
        "https://a.test/broken",
        "https://a.test/slow",
        "https://a.test/good",
        "https://a.test/deeper",
    }
    assert scheduler.metrics.snapshot()['fetch_failures'] == 2
    assert scheduler.get_stats()['errors'] == 0


def test_seed_with_no_links_terminates(test_config):
    _, visited = _run(test_config, FakeFetcher(errors={SEED: 404}), SEED, worker_count=4, max_links=100)
    assert visited == {SEED}


def test_no_page_is_fetched_twice(test_config):
    urls = [f"https://a.test/{i}" for i in range(30)]
    pages = {url: links_page(*(f"/{j}" for j in range(30))) for url in urls}
    fetcher = FakeFetcher(pages=pages, delay=0.001)

    _, visited = _run(test_config, fetcher, urls[0], worker_count=8, max_links=1000)

    assert visited == set(urls)
    assert sorted(fetcher.requests) == sorted(urls)


def test_budget_overshoot_is_bounded(test_config):
    pages = {f"https://a.test/{i}": links_page(f"/{i + 1}", f"/{i + 2}") for i in range(200)}
    worker_count = 4

    _, visited = _run(test_config, FakeFetcher(pages=pages, delay=0.001),
                      "https://a.test/0", worker_count=worker_count, max_links=10)

    assert 10 < len(visited) <= 10 + worker_count


def test_invalid_starting_url_is_fatal_before_any_fetch(test_config):
    fetcher = FakeFetcher()
    with pytest.raises(InvalidStartingUrlError):
        _run(test_config, fetcher, "not a url")
    assert fetcher.requests == []


def test_invalid_worker_count_is_rejected(test_config):
    with pytest.raises(ConfigurationError):
        _run(test_config, FakeFetcher(), SEED, worker_count=0)


def test_status_reporting(test_config, capsys):
    fetcher = FakeFetcher(pages={SEED: links_page("/p1"), "https://a.test/p1": links_page()},
                          delay=0.05)

    scheduler, visited = _run(test_config, fetcher, SEED, worker_count=1, max_links=10, log_status=True)

    out = capsys.readouterr().out
    assert "Number of links visited:" in out
    assert "Number of links in the queue:" in out
    assert visited == {SEED, "https://a.test/p1"}
    assert scheduler.metrics.snapshot()['visited_urls'] == 2


def test_config_values_are_used_when_arguments_omitted(test_config):
    test_config.crawler.starting_url = SEED
    test_config.crawler.max_links = 0
    _, visited = _run(test_config, FakeFetcher(pages={SEED: links_page("/p1")}))
    assert visited == {SEED}


def test_stop_crawling_ends_run(test_config):
    pages = {f"https://a.test/{i}": links_page(f"/{i + 1}") for i in range(1000)}
    fetcher = FakeFetcher(pages=pages, delay=0.01)
    scheduler = CrawlerScheduler(test_config, fetcher=fetcher)

    async def scenario():
        run = asyncio.create_task(scheduler.run("https://a.test/0", worker_count=2, max_links=10000))
        await asyncio.sleep(0.1)
        scheduler.stop_crawling()
        return await asyncio.wait_for(run, timeout=5)

    visited = asyncio.run(scenario())
    assert 0 < len(visited) < 1000
    assert scheduler.is_running is False


def test_equivalent_absolute_links_are_fetched_once(test_config):
    fetcher = FakeFetcher(pages={
        SEED: links_page("/p1", "https://a.test/x/../p1", "https://a.test:443/p1"),
        "https://a.test/p1": links_page(),
    })

    _, visited = _run(test_config, fetcher, SEED, worker_count=1, max_links=50)

    assert visited == {SEED, "https://a.test/p1"}
    assert fetcher.requests.count("https://a.test/p1") == 1


def test_run_arguments_do_not_persist(test_config):
    scheduler = CrawlerScheduler(test_config, fetcher=FakeFetcher(pages={
        SEED: links_page("/p1"),
        "https://a.test/p1": links_page(),
        "https://b.test/": links_page(),
    }))

    async def scenario():
        first = await asyncio.wait_for(scheduler.run(SEED, max_links=0), timeout=10)
        second = await asyncio.wait_for(scheduler.run("https://b.test/"), timeout=10)
        return first, second

    first, second = asyncio.run(scenario())

    assert first == {SEED}
    assert second == {"https://b.test/"}
    assert scheduler.config.crawler.starting_url is None
    assert scheduler.config.crawler.max_links == test_config.crawler.max_links
    with pytest.raises(InvalidStartingUrlError):
        asyncio.run(scheduler.run())


def test_result_is_a_copy_of_the_visited_set(test_config):
    scheduler, visited = _run(test_config, FakeFetcher(pages={SEED: links_page()}), SEED)
    visited.add("https://a.test/other")
    assert scheduler.frontier.visited_snapshot() == frozenset({SEED})
