"""
Pytest configuration and fixtures for crawler tests.
"""

import logging
import os

import pytest
from hypothesis import settings, Verbosity

from frontier_crawler.utils.config import load_config_from_dict

# Configure Hypothesis for faster test runs
settings.register_profile("fast", max_examples=25, deadline=None, verbosity=Verbosity.quiet)
settings.register_profile("thorough", max_examples=300, deadline=None, verbosity=Verbosity.normal)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))


@pytest.fixture
def test_config():
    """Configuration tuned for fast test runs."""
    return load_config_from_dict({
        'crawler': {
            'max_links': 10,
            'worker_count': 2,
            'idle_delay': 0.01,
            'status_interval': 0.01,
            'request_timeout': 1.0,
        },
    })


def pytest_configure(config):
    """Keep crawler and Hypothesis logging quiet during tests."""
    logging.getLogger("frontier_crawler").setLevel(logging.WARNING)
    logging.getLogger("hypothesis").setLevel(logging.WARNING)
