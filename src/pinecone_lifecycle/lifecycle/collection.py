"""Collection reconciler: create, read and delete one collection."""

from __future__ import annotations

import logging

from pinecone_lifecycle.client.errors import (
    CreateFailed,
    DeleteFailed,
    NotFoundError,
    PineconeLifecycleError,
    ValidationError,
    WaitCancelled,
    WaitTimeout,
)
from pinecone_lifecycle.lifecycle.base import Checkpoint, Reconciler, is_not_found
from pinecone_lifecycle.models.collection import CollectionSpec, CollectionState

logger = logging.getLogger(__name__)


class CollectionReconciler(Reconciler):
    """Drives one collection through create and delete.

    A collection is a snapshot: it is ready once its status label is exactly
    ``"Ready"``, and it cannot be modified afterwards.
    """

    kind = "collection"

    def create(
        self, spec: CollectionSpec, *, timeout: float | None = None,
    ) -> CollectionState:
        operation = self._operation("create")
        budget = (
            timeout if timeout is not None else self.settings.collection_create_timeout
        )
        try:
            self.client.create_collection(spec)
        except PineconeLifecycleError as exc:
            raise CreateFailed(operation, spec.name, str(exc)) from exc
        logger.info(
            "Creating collection %r from index %r, waiting up to %gs",
            spec.name, spec.source, budget,
        )

        checkpoint = Checkpoint(self.state)
        try:
            return self.poller.until_converged(
                lambda: self.client.describe_collection(spec.name, source=spec.source),
                converged=lambda state: state.ready,
                checkpoint=checkpoint,
                timeout=budget,
                operation=operation,
                name=spec.name,
            )
        except (WaitTimeout, WaitCancelled):
            raise
        except PineconeLifecycleError as exc:
            raise CreateFailed(
                operation, spec.name, str(exc), last_state=checkpoint.last_state,
            ) from exc

    def read(self, name: str, *, source: str | None = None) -> CollectionState:
        """Describe the collection once and persist what was seen.

        The API does not report the source index, so pass the known ``source``
        to keep it in the durable record.
        """
        state = self.client.describe_collection(name, source=source)
        self._persist(state)
        return state

    def update(self, name: str, *, source: str | None = None) -> CollectionState:
        """Collections cannot be modified; this only refreshes the record."""
        logger.info("Collections do not support updates; refreshing %r", name)
        return self.read(name, source=source)

    def delete(
        self, name: str, *, timeout: float | None = None, source: str | None = None,
    ) -> None:
        """Delete the collection and wait until describe reports it gone."""
        operation = self._operation("delete")
        budget = (
            timeout if timeout is not None else self.settings.collection_delete_timeout
        )
        try:
            self.client.delete_collection(name)
        except NotFoundError:
            logger.info("Collection %r already absent", name)
        except PineconeLifecycleError as exc:
            raise DeleteFailed(operation, name, str(exc)) from exc

        checkpoint = Checkpoint(self.state)
        try:
            self.poller.until_absent(
                lambda: self.client.describe_collection(name, source=source),
                absent=is_not_found,
                checkpoint=checkpoint,
                timeout=budget,
                operation=operation,
                name=name,
            )
        except (WaitTimeout, WaitCancelled):
            raise
        except PineconeLifecycleError as exc:
            raise DeleteFailed(
                operation, name, str(exc), last_state=checkpoint.last_state,
            ) from exc
        self._discard(name)

    def list(self) -> list[CollectionState]:
        return self.client.list_collections()

    def import_state(self, name: str, *, source: str | None = None) -> CollectionState:
        """Start managing an existing collection by recording its current state."""
        return self.read(name, source=source)

    def apply(
        self,
        spec: CollectionSpec,
        *,
        current: CollectionState | None = None,
        timeout: float | None = None,
    ) -> CollectionState:
        """Create the collection unless it is already managed.

        A managed collection is only refreshed; pointing it at another source
        index requires replacing it.
        """
        if current is None:
            return self.create(spec, timeout=timeout)
        if current.source is not None and current.source != spec.source:
            raise ValidationError(
                f"collection {spec.name!r} requires replacement:"
                f" source {current.source} -> {spec.source}"
            )
        try:
            return self.read(spec.name, source=spec.source)
        except NotFoundError:
            logger.info("Collection %r vanished remotely, recreating", spec.name)
            return self.create(spec, timeout=timeout)
