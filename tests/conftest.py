"""
Test configuration and fixtures.

This module provides the pytest configuration and shared fixtures.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import pytest

from safewatch.adapters.storage import MemoryStateStore
from safewatch.common.errors import UpstreamUnavailable
from safewatch.core.models import CheckResult, Location, Source
from safewatch.settings import Settings

SEATTLE = (47.6062, -122.3321)
FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeFetcher:
    """HttpFetchPort stand-in serving canned bodies by URL prefix"""

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = dict(responses or {})
        self.calls = []

    def _lookup(self, url: str):
        for prefix, value in self.responses.items():
            if url.startswith(prefix):
                return value
        raise UpstreamUnavailable(f"no canned response for {url}", url=url)

    async def get_text(self, url: str, params=None) -> str:
        self.calls.append((url, params))
        value = self._lookup(url)
        if isinstance(value, BaseException):
            raise value
        return value

    async def get_json(self, url: str, params=None):
        self.calls.append((url, params))
        value = self._lookup(url)
        if isinstance(value, BaseException):
            raise value
        return value


class StaticAdapter:
    """FeedAdapterPort returning a fixed result, optionally after a delay"""

    def __init__(self, source: Source, result: Optional[CheckResult] = None, *, delay: float = 0.0, exc=None):
        self.source = source
        self.result = result or CheckResult.from_alerts(source, [])
        self.delay = delay
        self.exc = exc
        self.calls = 0

    async def fetch(self, location: Location) -> CheckResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.result

    def endpoint(self, location: Location):
        return f"static://{self.source.value}"


@pytest.fixture
def fixed_now():
    """Fixed evaluation time"""
    return FIXED_NOW


@pytest.fixture
def clock(fixed_now):
    """Clock returning the fixed time"""
    return lambda: fixed_now


@pytest.fixture
def seattle():
    """Monitored location used by the end-to-end scenarios"""
    return Location(lat=SEATTLE[0], lon=SEATTLE[1], accuracy=10.0, captured_at=FIXED_NOW)


@pytest.fixture
def memory_store(clock):
    """In-memory state store on the fixed clock"""
    return MemoryStateStore(clock=clock)


@pytest.fixture
def fake_fetcher():
    """Empty fake fetcher; tests fill `responses`"""
    return FakeFetcher()


@pytest.fixture
def make_fetcher():
    """FakeFetcher factory"""
    return FakeFetcher


@pytest.fixture
def make_adapter():
    """StaticAdapter factory"""
    return StaticAdapter


@pytest.fixture
def sample_settings(tmp_path):
    """Settings pointing every path into a temp directory"""
    settings = Settings()
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    settings.observability.http_port = 8080
    settings.storage.state_dir = str(tmp_path / "state")
    settings.storage.logs_dir = str(tmp_path / "logs")
    settings.storage.sqlite_path = str(tmp_path / "reports.db")
    settings.webhook.secret_key = "test-secret"
    return settings


def pytest_configure(config):
    """pytest configuration"""
    config.addinivalue_line(
        "markers", "slow: slow test marker"
    )
    config.addinivalue_line(
        "markers", "integration: integration test marker"
    )


def pytest_collection_modifyitems(config, items):
    """Tag tests by name"""
    for item in items:
        if "timeout" in item.name:
            item.add_marker(pytest.mark.slow)

        if "integration" in item.name or "end_to_end" in item.name:
            item.add_marker(pytest.mark.integration)
