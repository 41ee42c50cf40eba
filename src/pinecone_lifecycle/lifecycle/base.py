"""Pieces shared by the index and collection reconcilers."""

from __future__ import annotations

from typing import Any

from pinecone_lifecycle.client.control_plane import ControlPlaneClient
from pinecone_lifecycle.client.errors import ErrorKind, PineconeLifecycleError, StateStoreError
from pinecone_lifecycle.config.models import LifecycleSettings
from pinecone_lifecycle.lifecycle.poller import Poller
from pinecone_lifecycle.state.store import Observation, StateWriter


def is_not_found(exc: PineconeLifecycleError) -> bool:
    return exc.kind is ErrorKind.NOT_FOUND


def persist(state: StateWriter, observation: Observation) -> None:
    """Hand ``observation`` to the writer; I/O failures become ``StateStoreError``."""
    try:
        state.persist(observation)
    except OSError as exc:
        raise StateStoreError(
            f"Cannot record {observation.kind} {observation.name!r}: {exc}"
        ) from exc


class Checkpoint:
    """Persists every observation and remembers the latest one."""

    def __init__(self, state: StateWriter) -> None:
        self.state = state
        self.last: Any = None

    def __call__(self, observation: Observation) -> None:
        self.last = observation
        persist(self.state, observation)

    @property
    def last_state(self) -> str | None:
        return getattr(self.last, "state_label", None)


class Reconciler:
    """Common wiring: client, state writer, wait budgets and poller."""

    kind: str = ""

    def __init__(
        self,
        client: ControlPlaneClient,
        state: StateWriter,
        settings: LifecycleSettings | None = None,
        *,
        poller: Poller | None = None,
    ) -> None:
        self.client = client
        self.state = state
        self.settings = settings or LifecycleSettings()
        self.poller = poller or Poller.from_settings(self.settings)

    def _operation(self, verb: str) -> str:
        return f"{verb} {self.kind}"

    def _persist(self, observation: Observation) -> None:
        persist(self.state, observation)

    def _discard(self, name: str) -> None:
        try:
            self.state.discard(self.kind, name)
        except OSError as exc:
            raise StateStoreError(f"Cannot forget {self.kind} {name!r}: {exc}") from exc
