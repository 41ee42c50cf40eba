"""Pydantic data models for the Pinecone control plane."""

from pinecone_lifecycle.models.collection import CollectionSpec, CollectionState
from pinecone_lifecycle.models.common import ErrorResponse
from pinecone_lifecycle.models.index import (
    Cloud,
    IndexConfiguration,
    IndexSpec,
    IndexState,
    IndexStatus,
    MetadataConfig,
    Metric,
    PodSpec,
    ServerlessSpec,
)

__all__ = [
    "Cloud",
    "CollectionSpec",
    "CollectionState",
    "ErrorResponse",
    "IndexConfiguration",
    "IndexSpec",
    "IndexState",
    "IndexStatus",
    "MetadataConfig",
    "Metric",
    "PodSpec",
    "ServerlessSpec",
]
