"""
Shared pytest fixtures for channel tag tests.

Provides test configurations, fake registration services and an
in-process channel API for unit and integration tests.
"""

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest

from channel_tags.config import (
    Config,
    ApiConfig,
    ChannelConfig,
    SyncConfig,
    StoreConfig,
    RetryConfig,
    set_config,
)
from channel_tags.persistence import TagStore
from channel_tags.registry import TagRegistry
from channel_tags.sync import RegistrationQueue


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def test_config(tmp_path) -> Config:
    """Create a test configuration with fast timeouts and a temp store."""
    return Config(
        api=ApiConfig(
            base_url="https://channels.test/api",
            timeout=5.0,
            connect_timeout=2.0,
        ),
        channel=ChannelConfig(
            channel_id="chan-123",
            app_key="key",
            app_secret="secret",
        ),
        sync=SyncConfig(
            check_interval=0.05,  # Fast for testing
            max_sync_attempts=2,
        ),
        store=StoreConfig(
            path=str(tmp_path / "channel_tags.json"),
        ),
        retry=RetryConfig(
            max_attempts=2,
            base_delay=0.0,
            max_delay=0.0,
        ),
    )


# =============================================================================
# Registry Fixtures
# =============================================================================

@pytest.fixture
def mock_service() -> MagicMock:
    """Create a registration service mock with no registered tags."""
    service = MagicMock()
    service.current_tags.return_value = []
    return service


@pytest.fixture
def registry(mock_service) -> TagRegistry:
    """Create an empty registry backed by the mock service."""
    return TagRegistry.from_service(mock_service)


@pytest.fixture
def abc_registry(mock_service) -> TagRegistry:
    """Create a registry seeded with ["a", "b", "c"]."""
    mock_service.current_tags.return_value = ["a", "b", "c"]
    return TagRegistry.from_service(mock_service)


@pytest.fixture
def registration_queue() -> RegistrationQueue:
    return RegistrationQueue()


@pytest.fixture
def tag_store(tmp_path) -> TagStore:
    """Create a TagStore in a temp directory."""
    return TagStore(path=str(tmp_path / "store" / "channel_tags.json"))


# =============================================================================
# Channel API Fixtures
# =============================================================================

class FakeChannelAPI:
    """
    In-process channel registration endpoint for httpx.MockTransport.

    GET returns the registered tags, PUT replaces them. Queued status codes
    are returned (in order) before normal handling resumes.
    """

    def __init__(self, tags: Optional[List[str]] = None):
        self.tags: List[str] = list(tags or [])
        self.requests: List[httpx.Request] = []
        self.payloads: List[Dict[str, Any]] = []
        self.fail_with: List[int] = []
        self.put_event = threading.Event()
        self._lock = threading.Lock()

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)

            if self.fail_with:
                status = self.fail_with.pop(0)
                return httpx.Response(status, text="failure")

            if request.method == "GET":
                return httpx.Response(200, json={"ok": True, "channel": {"tags": self.tags}})

            if request.method == "PUT":
                payload = json.loads(request.content)
                self.payloads.append(payload)
                self.tags = list(payload["channel"]["tags"])
                self.put_event.set()
                return httpx.Response(200, json={"ok": True, "channel_id": "chan-123"})

            return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def puts(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self.payloads)


@pytest.fixture
def channel_api() -> FakeChannelAPI:
    return FakeChannelAPI()


# =============================================================================
# Cleanup Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def cleanup_global_state():
    """Clean up global state after each test."""
    yield
    set_config(None)
