"""
Pytest fixtures for the TomorrowDAO skill tests.
"""
import logging
import os
import time

import pytest

from tomorrowdao_skill.api.auth import clear_token_cache
from tomorrowdao_skill.chain.pool import clear_rpc_pool
from tomorrowdao_skill.config import reset_config_cache

from tests.test_helpers.mock_chain import TEST_API_BASE, TEST_AUTH_BASE, TEST_RPC_AELF, TEST_RPC_TDVV


# Make time.sleep instantaneous so retries and polling don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """
    Start every test from a clean TMRW_* environment pointing at test hosts,
    with empty config, token and RPC caches.
    """
    for name in list(os.environ):
        if name.startswith("TMRW_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TMRW_API_BASE", TEST_API_BASE)
    monkeypatch.setenv("TMRW_AUTH_BASE", TEST_AUTH_BASE)
    monkeypatch.setenv("TMRW_RPC_AELF", TEST_RPC_AELF)
    monkeypatch.setenv("TMRW_RPC_TDVV", TEST_RPC_TDVV)

    reset_config_cache()
    clear_token_cache()
    clear_rpc_pool()
    yield
    reset_config_cache()
    clear_token_cache()
    clear_rpc_pool()


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """configure_logging() detaches the package logger; undo that after each test"""
    package_logger = logging.getLogger("tomorrowdao_skill")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


@pytest.fixture
def sleeps(monkeypatch):
    """Record requested sleep durations instead of sleeping"""
    recorded = []
    monkeypatch.setattr(time, "sleep", lambda seconds: recorded.append(seconds))
    return recorded
