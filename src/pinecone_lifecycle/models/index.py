"""Index data models: desired spec, placement variants, and observed state."""

from __future__ import annotations

import enum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_serializer

POD_TYPE_PATTERN = r"^(starter|(s1|p1|p2)\.(x1|x2|x4|x8))$"


class Metric(str, enum.Enum):
    """Distance metric used for similarity search."""

    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOTPRODUCT = "dotproduct"


class Cloud(str, enum.Enum):
    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"


class MetadataConfig(BaseModel):
    """Which metadata fields the pod index builds a filter index for."""

    indexed: list[str] | None = None


class PodSpec(BaseModel):
    """Pod-based placement."""

    kind: Literal["pod"] = Field(default="pod", exclude=True)
    environment: str
    replicas: int = Field(default=1, ge=1)
    shards: int = Field(default=1, ge=1)
    pod_type: str = Field(default="p1.x1", pattern=POD_TYPE_PATTERN)
    pods: int = Field(default=1, ge=1)
    metadata_config: MetadataConfig | None = None
    source_collection: str | None = None


class ServerlessSpec(BaseModel):
    """On-demand placement."""

    kind: Literal["serverless"] = Field(default="serverless", exclude=True)
    cloud: Cloud
    region: str


Placement = Annotated[Union[PodSpec, ServerlessSpec], Field(discriminator="kind")]


def placement_from_wire(value: Any) -> Any:
    """Turn ``{"pod": {...}}`` / ``{"serverless": {...}}`` into a tagged variant.

    Both the API and manifests nest the active variant under its name. Exactly
    one of the two keys must be present and non-null.
    """
    if not isinstance(value, dict) or "kind" in value:
        return value
    variants = {
        key: body for key, body in value.items()
        if key in ("pod", "serverless") and body is not None
    }
    if len(variants) != 1:
        raise ValueError(
            "placement must set exactly one of 'pod' or 'serverless'"
            f" (got {sorted(variants) or 'none'})"
        )
    kind, body = next(iter(variants.items()))
    return {"kind": kind, **body}


def ensure_single_placement(value: Any) -> PodSpec | ServerlessSpec:
    """Return the active placement variant or raise ``ValueError``.

    Accepts an already-built variant, or the nested wire shape for specs that
    were assembled without validation.
    """
    if isinstance(value, (PodSpec, ServerlessSpec)):
        return value
    if value is None:
        raise ValueError("placement must set exactly one of 'pod' or 'serverless' (got none)")
    data = placement_from_wire(value)
    if isinstance(data, dict) and data.get("kind") == "pod":
        return PodSpec(**data)
    if isinstance(data, dict) and data.get("kind") == "serverless":
        return ServerlessSpec(**data)
    raise ValueError(f"unsupported placement: {value!r}")


def placement_to_wire(placement: PodSpec | ServerlessSpec) -> dict[str, Any]:
    return {placement.kind: placement.model_dump(mode="json", exclude_none=True)}


class _PlacedModel(BaseModel):
    """Base for models carrying a placement, serialized in its nested wire shape."""

    spec: Placement

    @field_validator("spec", mode="before")
    @classmethod
    def unwrap_placement(cls, v: Any) -> Any:
        return placement_from_wire(v)

    @model_serializer(mode="wrap")
    def serialize(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        data["spec"] = placement_to_wire(self.spec)
        return data


class IndexSpec(_PlacedModel):
    """Desired configuration of an index."""

    name: str = Field(min_length=1, max_length=45)
    dimension: int = Field(gt=0)
    metric: Metric = Metric.COSINE

    def to_request(self) -> dict[str, Any]:
        """Body of ``POST /indexes``."""
        return {
            "name": self.name,
            "dimension": self.dimension,
            "metric": self.metric.value,
            "spec": placement_to_wire(self.spec),
        }


class IndexConfiguration(BaseModel):
    """The mutable subset of an index: only pod indexes can be reconfigured."""

    replicas: int | None = Field(default=None, ge=1)
    pod_type: str | None = Field(default=None, pattern=POD_TYPE_PATTERN)

    @property
    def is_empty(self) -> bool:
        return self.replicas is None and self.pod_type is None

    def to_request(self) -> dict[str, Any]:
        """Body of ``PATCH /indexes/{name}``."""
        pod = self.model_dump(exclude_none=True)
        return {"spec": {"pod": pod}}


class IndexStatus(BaseModel):
    """Readiness as last reported by the backend."""

    ready: bool = False
    state: str = "Unknown"


class IndexState(_PlacedModel):
    """An index as observed on the control plane."""

    kind: ClassVar[str] = "index"

    name: str
    dimension: int
    metric: Metric = Metric.COSINE
    host: str | None = None
    status: IndexStatus | None = None

    @property
    def ready(self) -> bool:
        return self.status is not None and self.status.ready

    @property
    def state_label(self) -> str | None:
        return self.status.state if self.status else None

    def configuration(self) -> IndexConfiguration:
        if isinstance(self.spec, PodSpec):
            return IndexConfiguration(
                replicas=self.spec.replicas, pod_type=self.spec.pod_type,
            )
        return IndexConfiguration()
