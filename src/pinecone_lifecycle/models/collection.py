"""Collection data models."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, Field

READY_STATUS = "Ready"


class CollectionSpec(BaseModel):
    """Desired collection: a snapshot of ``source``, taken once at creation."""

    name: str = Field(min_length=1, max_length=45)
    source: str = Field(min_length=1, description="Name of the source index")

    def to_request(self) -> dict[str, Any]:
        """Body of ``POST /collections``."""
        return {"name": self.name, "source": self.source}


class CollectionState(BaseModel):
    """A collection as observed on the control plane.

    ``size`` and ``status`` stay ``None`` until the backend reports them. The
    API does not echo ``source`` back, so it is carried over from the spec or
    from the previously persisted record.
    """

    kind: ClassVar[str] = "collection"

    name: str
    source: str | None = None
    size: int | None = None
    status: str | None = None
    dimension: int | None = None
    vector_count: int | None = None
    environment: str | None = None

    @property
    def ready(self) -> bool:
        return self.status == READY_STATUS

    @property
    def state_label(self) -> str | None:
        return self.status
