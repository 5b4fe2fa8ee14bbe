"""Pytest configuration and fixtures."""

import pytest

from brainus_ai.config import set_settings

from .fixtures.fake_api import FakeBrainusAPI

VALID_KEY = "brainus_test_key_12345"


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against the live Brainus API (requires BRAINUS_API_KEY)",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-integration"):
        return
    skip = pytest.mark.skip(reason="needs --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def api_key():
    return VALID_KEY


@pytest.fixture
def fake_api():
    """Fake Brainus API served through an httpx.MockTransport."""
    return FakeBrainusAPI()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run in an empty cwd with no BRAINUS_* variables and no cached settings."""
    for key in ["BRAINUS_API_KEY", "BRAINUS_BASE_URL", "BRAINUS_TIMEOUT", "BRAINUS_MAX_RETRIES"]:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    set_settings(None)
    yield tmp_path
    set_settings(None)


@pytest.fixture
def no_sleep(monkeypatch):
    """Record backoff waits instead of sleeping."""
    waits = []
    monkeypatch.setattr("time.sleep", waits.append)
    return waits
