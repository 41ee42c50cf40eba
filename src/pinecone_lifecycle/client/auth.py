"""Authentication for the Pinecone control plane."""

from __future__ import annotations

from collections.abc import Generator

import httpx

from pinecone_lifecycle.config.models import ProjectProfile


class APIKeyAuth(httpx.Auth):
    """Authenticate using a project API key (Api-Key header)."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def auth_flow(
        self, request: httpx.Request,
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Api-Key"] = self.api_key
        yield request


def resolve_auth(profile: ProjectProfile) -> httpx.Auth | None:
    """Resolve authentication from a project profile."""
    if profile.api_key:
        return APIKeyAuth(profile.api_key)
    return None
