"""Durable state: the last observation of every managed resource."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, ClassVar, Protocol

from pydantic import BaseModel

from pinecone_lifecycle.client.errors import ConfigurationError, StateStoreError

logger = logging.getLogger(__name__)

STATE_VERSION = 1
KINDS = ("index", "collection")


class Observation(Protocol):
    kind: ClassVar[str]
    name: str

    def model_dump(self, **kwargs: Any) -> dict[str, Any]: ...


class StateWriter(Protocol):
    """Where reconcilers checkpoint what they observed."""

    def persist(self, observation: Observation) -> None:
        """Upsert ``observation`` keyed by (kind, name). Must be idempotent."""

    def discard(self, kind: str, name: str) -> None:
        """Forget a resource once it is known to be gone."""


class JsonStateStore:
    """A ``StateWriter`` backed by one JSON file.

    Layout: ``{"version": 1, "index": {name: {...}}, "collection": {...}}``.
    Every write rewrites the whole file through a temp file and a rename, so
    an interrupted write leaves the previous content intact.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._data: dict[str, Any] | None = None

    @property
    def data(self) -> dict[str, Any]:
        if self._data is None:
            self._data = self._load()
        return self._data

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"version": STATE_VERSION, **{kind: {} for kind in KINDS}}
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"Cannot parse state file {self.path}: {exc}") from exc
        except OSError as exc:
            raise StateStoreError(f"Cannot read state file {self.path}: {exc}") from exc
        if not isinstance(data, dict) or data.get("version") != STATE_VERSION:
            raise ConfigurationError(
                f"Unsupported state file {self.path}: expected version {STATE_VERSION}"
            )
        for kind in KINDS:
            data.setdefault(kind, {})
        return data

    def _save(self) -> None:
        temp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp.write_text(json.dumps(self.data, indent=2, sort_keys=True) + "\n")
            os.replace(temp, self.path)
        except OSError as exc:
            raise StateStoreError(f"Cannot write state file {self.path}: {exc}") from exc

    def persist(self, observation: Observation) -> None:
        record = observation.model_dump(mode="json")
        bucket = self.data[observation.kind]
        if bucket.get(observation.name) == record:
            return
        bucket[observation.name] = record
        self._save()
        logger.debug("persisted %s %r", observation.kind, observation.name)

    def discard(self, kind: str, name: str) -> None:
        if self.data[kind].pop(name, None) is not None:
            self._save()
            logger.debug("discarded %s %r", kind, name)

    def load(self, kind: str, name: str) -> dict[str, Any] | None:
        return self.data[kind].get(name)

    def load_model(self, model: type[BaseModel], name: str) -> Any:
        """Load a record and rebuild it as ``model``, or ``None`` if absent."""
        record = self.load(model.kind, name)  # type: ignore[attr-defined]
        if record is None:
            return None
        return model.model_validate(record)

    def list(self, kind: str) -> dict[str, dict[str, Any]]:
        return dict(self.data[kind])
