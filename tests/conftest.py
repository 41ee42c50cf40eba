"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from pinecone_lifecycle.client.control_plane import ControlPlaneClient
from pinecone_lifecycle.config.manager import ConfigManager
from pinecone_lifecycle.config.models import ProjectProfile
from pinecone_lifecycle.lifecycle.poller import Poller

BASE = "https://api.test.pinecone.io"


def pytest_addoption(parser):
    parser.addoption("--api-key", action="store", default=None)
    parser.addoption("--environment", action="store", default=None)


@pytest.fixture
def live_opts(request):
    api_key = request.config.getoption("--api-key")
    if not api_key:
        pytest.skip("Live project credentials not provided")
    return ["--api-key", api_key]


class FakeClock:
    """A monotonic clock that only moves when something sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingState:
    """A StateWriter that keeps every call for inspection."""

    def __init__(self) -> None:
        self.persisted: list[Any] = []
        self.discarded: list[tuple[str, str]] = []

    def persist(self, observation: Any) -> None:
        self.persisted.append(observation)

    def discard(self, kind: str, name: str) -> None:
        self.discarded.append((kind, name))


def index_payload(
    name: str = "widget",
    *,
    state: str = "Ready",
    ready: bool = True,
    replicas: int = 1,
    pod_type: str = "s1.x1",
) -> dict[str, Any]:
    """A describe-index response as the control plane returns it."""
    return {
        "name": name,
        "dimension": 512,
        "metric": "cosine",
        "host": f"{name}-abc123.svc.us-west4-gcp.pinecone.io",
        "spec": {
            "pod": {
                "environment": "us-west4-gcp",
                "replicas": replicas,
                "shards": 1,
                "pod_type": pod_type,
                "pods": replicas,
                "metadata_config": None,
                "source_collection": None,
            },
            "serverless": None,
        },
        "status": {"ready": ready, "state": state},
    }


def collection_payload(
    name: str = "snap", *, status: str = "Ready", size: int | None = 3_126_700,
) -> dict[str, Any]:
    """A describe-collection response as the control plane returns it."""
    payload: dict[str, Any] = {
        "name": name,
        "status": status,
        "environment": "us-west4-gcp",
        "dimension": 512,
        "vector_count": 120,
    }
    if size is not None:
        payload["size"] = size
    return payload


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Return a temporary config file path."""
    return tmp_path / "config.toml"


@pytest.fixture
def config_manager(tmp_config: Path) -> ConfigManager:
    """Return a ConfigManager pointed at a temp config file."""
    return ConfigManager(config_path=tmp_config)


@pytest.fixture
def sample_profile() -> ProjectProfile:
    """Return a sample project profile for testing."""
    return ProjectProfile(name="test", url=BASE, api_key="pk-test-123456")


@pytest.fixture
def client(sample_profile: ProjectProfile):
    with ControlPlaneClient(sample_profile) as c:
        yield c


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def poller(clock: FakeClock) -> Poller:
    return Poller(interval=1.0, clock=clock, sleep=clock.sleep)


@pytest.fixture
def recorder() -> RecordingState:
    return RecordingState()


@pytest.fixture
def isolated_config(config_manager: ConfigManager, monkeypatch: pytest.MonkeyPatch):
    """Point CLI commands at a temp config and clear PINECONE_* env vars."""
    for var in (
        "PINECONE_API_KEY",
        "PINECONE_CONTROLLER_URL",
        "PINECONE_PROFILE",
        "PINECONE_LIFECYCLE_STATE",
    ):
        monkeypatch.delenv(var, raising=False)
    with patch(
        "pinecone_lifecycle.commands._common._get_manager",
        return_value=config_manager,
    ):
        yield config_manager


@pytest.fixture
def index_json():
    """Factory for describe-index payloads."""
    return index_payload


@pytest.fixture
def collection_json():
    """Factory for describe-collection payloads."""
    return collection_payload
