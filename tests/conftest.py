"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration and marker
registration. All fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from travis_v3.config import Config, Endpoint

TEST_TOKEN = "test-token"  # noqa: S105

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_travis_env(request, monkeypatch):
    """Clear TRAVIS_* env vars so tests never pick up a real token.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("TRAVIS_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "contract: Wire-format characterization against the v3 API shapes",
        "allow_dotenv: Permit python-dotenv to load .env files",
        "allow_env_pollution: Keep TRAVIS_* environment variables",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def config() -> Config:
    """Config bound to the .org endpoint with a fake token."""
    return Config(token=TEST_TOKEN, endpoint=Endpoint.ORG)
