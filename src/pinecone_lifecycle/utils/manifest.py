"""Desired-state reader — load index and collection specs from YAML or JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypeVar

import pydantic
import yaml

from pinecone_lifecycle.client.errors import PineconeLifecycleError, ValidationError
from pinecone_lifecycle.models.collection import CollectionSpec
from pinecone_lifecycle.models.index import IndexSpec

M = TypeVar("M", bound=pydantic.BaseModel)


def load_manifest(path: Path) -> dict[str, Any]:
    """Parse a manifest file into a mapping (JSON by suffix, YAML otherwise)."""
    try:
        text = path.read_text()
    except OSError as exc:
        raise PineconeLifecycleError(f"Cannot read manifest {path}: {exc}") from exc
    try:
        if path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ValidationError(f"{path}: cannot parse manifest: {exc}") from exc
    if not isinstance(data, dict):
        raise ValidationError(f"{path}: manifest must be a mapping")
    return data


def _format_errors(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_spec(model: type[M], data: dict[str, Any], *, source: str = "manifest") -> M:
    """Validate ``data`` into ``model``, raising our ``ValidationError``."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        raise ValidationError(f"{source}: {_format_errors(exc)}") from exc


def read_index_spec(path: Path) -> IndexSpec:
    """Read an index manifest.

    Example::

        name: widget
        dimension: 512
        metric: cosine
        spec:
          pod:
            environment: us-west4-gcp
            pod_type: s1.x1
    """
    return parse_spec(IndexSpec, load_manifest(path), source=str(path))


def read_collection_spec(path: Path) -> CollectionSpec:
    return parse_spec(CollectionSpec, load_manifest(path), source=str(path))
