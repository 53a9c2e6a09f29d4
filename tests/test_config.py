"""
Tests for environment-based configuration.
"""

from __future__ import annotations

import pytest

from eth_fund_flow.config import Config

ENV_VARS = [
    "ETHERSCAN_API_KEY", "ETHERSCAN_BASE_URL", "REQUEST_TIMEOUT", "MAX_RETRIES",
    "RETRY_BACKOFF", "PAGE_SIZE", "PORT", "DISPLAY_TIMEZONE", "LOG_LEVEL", "VERBOSE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_api_key_is_required():
    with pytest.raises(ValueError, match="ETHERSCAN_API_KEY"):
        Config.from_env()


def test_defaults(monkeypatch):
    monkeypatch.setenv("ETHERSCAN_API_KEY", "abc")

    config = Config.from_env()

    assert config.etherscan_api_key == "abc"
    assert config.port == 8080
    assert config.request_timeout == 60.0
    assert config.max_retries == 3
    assert config.page_size == 100
    assert config.display_timezone == "UTC"
    assert config.verbose is False


def test_overrides(monkeypatch):
    monkeypatch.setenv("ETHERSCAN_API_KEY", "abc")
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("MAX_RETRIES", "5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("VERBOSE", "TRUE")

    config = Config.from_env()

    assert config.port == 9090
    assert config.max_retries == 5
    assert config.log_level == "DEBUG"
    assert config.verbose is True


@pytest.mark.parametrize("zone", ["Mars/Olympus", "not a zone"])
def test_unknown_display_timezone_is_rejected(monkeypatch, zone):
    monkeypatch.setenv("ETHERSCAN_API_KEY", "abc")
    monkeypatch.setenv("DISPLAY_TIMEZONE", zone)

    with pytest.raises(ValueError, match="DISPLAY_TIMEZONE"):
        Config.from_env()


def test_named_display_timezone_is_accepted(monkeypatch):
    monkeypatch.setenv("ETHERSCAN_API_KEY", "abc")
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Asia/Tokyo")

    assert Config.from_env().display_timezone == "Asia/Tokyo"


def test_unknown_log_level_is_rejected(monkeypatch):
    monkeypatch.setenv("ETHERSCAN_API_KEY", "abc")
    monkeypatch.setenv("LOG_LEVEL", "loud")

    with pytest.raises(ValueError, match="LOG_LEVEL"):
        Config.from_env()
