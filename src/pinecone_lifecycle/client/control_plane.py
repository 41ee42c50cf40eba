"""Control plane HTTP client."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
import pydantic

from pinecone_lifecycle.client.auth import resolve_auth
from pinecone_lifecycle.client.errors import (
    AuthenticationError,
    ConflictError,
    ControlPlaneAPIError,
    ControlPlaneConnectionError,
    NotFoundError,
    ValidationError,
)
from pinecone_lifecycle.config.constants import DEFAULT_MAX_RETRIES
from pinecone_lifecycle.config.models import ProjectProfile
from pinecone_lifecycle.models.collection import CollectionSpec, CollectionState
from pinecone_lifecycle.models.common import ErrorResponse
from pinecone_lifecycle.models.index import IndexConfiguration, IndexSpec, IndexState

logger = logging.getLogger(__name__)


class ControlPlaneClient:
    """Synchronous HTTP client for the Pinecone control plane API.

    Every failure is raised as a typed exception whose ``kind`` tells the
    reconcilers whether it means not-found, a transport/server problem, or a
    rejected request.
    """

    def __init__(self, profile: ProjectProfile) -> None:
        self.profile = profile
        self.base_url = profile.url
        auth = resolve_auth(profile)
        if not profile.verify_ssl:
            logger.warning("TLS certificate verification is disabled")
        transport = httpx.HTTPTransport(retries=DEFAULT_MAX_RETRIES)
        self._client = httpx.Client(
            base_url=self.base_url,
            auth=auth,
            verify=profile.verify_ssl,
            timeout=profile.timeout,
            transport=transport,
            headers={
                "Accept": "application/json",
                "X-Pinecone-API-Version": profile.api_version,
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ControlPlaneClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        status = response.status_code
        try:
            detail = ErrorResponse.model_validate(response.json()).detail or response.text
        except (json.JSONDecodeError, pydantic.ValidationError):
            detail = response.text
        if status in (401, 403):
            raise AuthenticationError("Authentication failed. Check your API key.")
        if status == 404:
            raise NotFoundError(f"Not found: {detail}")
        if status == 409:
            raise ConflictError(f"Conflict: {detail}")
        if status in (400, 422):
            raise ValidationError(detail)
        raise ControlPlaneAPIError(status, detail)

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.ConnectError as exc:
            raise ControlPlaneConnectionError(
                f"Cannot connect to control plane at {self.profile.url}: {exc}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise ControlPlaneConnectionError(
                f"Request to {self.profile.url} timed out: {exc}"
            ) from exc
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise ControlPlaneConnectionError(
                f"Invalid URL for control plane at {self.profile.url}: {exc}"
            ) from exc
        except httpx.TransportError as exc:
            raise ControlPlaneConnectionError(
                f"{method} {path} failed talking to {self.profile.url}: {exc!r}"
            ) from exc
        return self._handle_response(response)

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    def get_json(self, path: str, **kwargs: Any) -> Any:
        resp = self.get(path, **kwargs)
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ControlPlaneAPIError(
                resp.status_code, f"Malformed JSON from {path}: {exc}",
            ) from exc

    def _parse(self, model: type[Any], data: Any, **extra: Any) -> Any:
        try:
            return model.model_validate({**data, **extra})
        except (pydantic.ValidationError, TypeError) as exc:
            raise ControlPlaneAPIError(
                200, f"Unexpected {model.__name__} payload: {exc}",
            ) from exc

    def _parse_each(self, model: type[Any], items: list[Any]) -> list[Any]:
        """Parse a listing, skipping entries this client cannot represent."""
        parsed = []
        for item in items:
            try:
                parsed.append(self._parse(model, item))
            except ControlPlaneAPIError as exc:
                name = item.get("name") if isinstance(item, dict) else None
                logger.warning("Skipping %s %r in listing: %s", model.kind, name, exc)
        return parsed

    # Indexes

    def create_index(self, spec: IndexSpec) -> None:
        self.post("/indexes", json=spec.to_request())

    def describe_index(self, name: str) -> IndexState:
        return self._parse(IndexState, self.get_json(f"/indexes/{name}"))

    def configure_index(self, name: str, changes: IndexConfiguration) -> None:
        self.patch(f"/indexes/{name}", json=changes.to_request())

    def delete_index(self, name: str) -> None:
        self.delete(f"/indexes/{name}")

    def list_indexes(self) -> list[IndexState]:
        data = self.get_json("/indexes")
        return self._parse_each(IndexState, data.get("indexes") or [])

    # Collections

    def create_collection(self, spec: CollectionSpec) -> None:
        self.post("/collections", json=spec.to_request())

    def describe_collection(
        self, name: str, *, source: str | None = None,
    ) -> CollectionState:
        data = self.get_json(f"/collections/{name}")
        return self._parse(CollectionState, data, source=source)

    def delete_collection(self, name: str) -> None:
        self.delete(f"/collections/{name}")

    def list_collections(self) -> list[CollectionState]:
        data = self.get_json("/collections")
        return self._parse_each(CollectionState, data.get("collections") or [])
