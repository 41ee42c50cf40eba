"""Pydantic models for CLI configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from pinecone_lifecycle.config.constants import (
    DEFAULT_API_VERSION,
    DEFAULT_COLLECTION_CREATE_TIMEOUT,
    DEFAULT_COLLECTION_DELETE_TIMEOUT,
    DEFAULT_CONTROLLER_URL,
    DEFAULT_INDEX_CREATE_TIMEOUT,
    DEFAULT_INDEX_DELETE_TIMEOUT,
    DEFAULT_MAX_POLL_INTERVAL,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TIMEOUT,
)


class ProjectProfile(BaseModel):
    """A named Pinecone project connection profile."""

    name: str
    url: str = Field(
        default=DEFAULT_CONTROLLER_URL,
        description="Control plane base URL, e.g. https://api.pinecone.io",
    )
    api_key: str | None = Field(default=None, description="Project API key")
    api_version: str = Field(
        default=DEFAULT_API_VERSION, description="X-Pinecone-API-Version header",
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, le=600, description="Request timeout in seconds",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/")


class LifecycleSettings(BaseModel):
    """Wait budgets and poll cadence for the reconcilers, in seconds."""

    index_create_timeout: float = Field(default=DEFAULT_INDEX_CREATE_TIMEOUT, gt=0)
    index_delete_timeout: float = Field(default=DEFAULT_INDEX_DELETE_TIMEOUT, gt=0)
    collection_create_timeout: float = Field(
        default=DEFAULT_COLLECTION_CREATE_TIMEOUT, gt=0,
    )
    collection_delete_timeout: float = Field(
        default=DEFAULT_COLLECTION_DELETE_TIMEOUT, gt=0,
    )
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, ge=0)
    poll_backoff: float = Field(
        default=1.0, ge=1.0, description="Multiplier applied to the interval after each probe",
    )
    max_poll_interval: float = Field(default=DEFAULT_MAX_POLL_INTERVAL, gt=0)

    @model_validator(mode="after")
    def check_interval_cap(self) -> LifecycleSettings:
        if self.poll_interval > self.max_poll_interval:
            raise ValueError("poll_interval must not exceed max_poll_interval")
        return self


class CLIConfig(BaseModel):
    """Root configuration model."""

    default_profile: str | None = None
    state_file: str | None = None
    profiles: dict[str, ProjectProfile] = Field(default_factory=dict)
    lifecycle: LifecycleSettings = Field(default_factory=LifecycleSettings)
