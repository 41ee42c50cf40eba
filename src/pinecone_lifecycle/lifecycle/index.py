"""Index reconciler: create, read, update and delete one Pinecone index."""

from __future__ import annotations

import logging

from pinecone_lifecycle.client.errors import (
    CreateFailed,
    DeleteFailed,
    NotFoundError,
    PineconeLifecycleError,
    UpdateFailed,
    ValidationError,
    WaitCancelled,
    WaitTimeout,
)
from pinecone_lifecycle.lifecycle.base import Checkpoint, Reconciler, is_not_found
from pinecone_lifecycle.models.index import (
    IndexConfiguration,
    IndexSpec,
    IndexState,
    PodSpec,
    ServerlessSpec,
    ensure_single_placement,
)

logger = logging.getLogger(__name__)


def _checked(spec: IndexSpec) -> IndexSpec:
    """Return ``spec`` with exactly one validated placement variant."""
    try:
        placement = ensure_single_placement(spec.spec)
    except ValueError as exc:
        raise ValidationError(f"index {spec.name!r}: {exc}") from exc
    return spec.model_copy(update={"spec": placement})


def replacement_reasons(spec: IndexSpec, observed: IndexState) -> list[str]:
    """Differences in fields that cannot change without recreating the index."""
    reasons = []
    if spec.dimension != observed.dimension:
        reasons.append(f"dimension {observed.dimension} -> {spec.dimension}")
    if spec.metric != observed.metric:
        reasons.append(f"metric {observed.metric.value} -> {spec.metric.value}")
    want, have = spec.spec, observed.spec
    if want.kind != have.kind:
        reasons.append(f"placement {have.kind} -> {want.kind}")
    elif isinstance(want, PodSpec) and isinstance(have, PodSpec):
        if want.environment != have.environment:
            reasons.append(f"environment {have.environment} -> {want.environment}")
        if want.shards != have.shards:
            reasons.append(f"shards {have.shards} -> {want.shards}")
        if want.metadata_config is not None and want.metadata_config != have.metadata_config:
            reasons.append("metadata_config")
    elif isinstance(want, ServerlessSpec) and isinstance(have, ServerlessSpec):
        if (want.cloud, want.region) != (have.cloud, have.region):
            reasons.append(
                f"location {have.cloud.value}/{have.region}"
                f" -> {want.cloud.value}/{want.region}"
            )
    return reasons


class IndexReconciler(Reconciler):
    """Drives one index towards its desired spec.

    Create and delete wait for the backend to converge, checkpointing every
    observation through the state writer. Update does not wait.
    """

    kind = "index"

    def create(self, spec: IndexSpec, *, timeout: float | None = None) -> IndexState:
        """Create the index and wait until the backend reports it ready.

        Raises ``ValidationError`` before any remote call if the placement is
        not exactly one of pod/serverless, ``CreateFailed`` if the request is
        rejected or a probe fails, and ``WaitTimeout`` if the index is not
        ready within ``timeout`` (default ``index_create_timeout``).
        """
        spec = _checked(spec)
        operation = self._operation("create")
        budget = timeout if timeout is not None else self.settings.index_create_timeout
        try:
            self.client.create_index(spec)
        except PineconeLifecycleError as exc:
            raise CreateFailed(operation, spec.name, str(exc)) from exc
        logger.info("Creating index %r, waiting up to %gs", spec.name, budget)

        checkpoint = Checkpoint(self.state)
        try:
            return self.poller.until_converged(
                lambda: self.client.describe_index(spec.name),
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

    def read(self, name: str) -> IndexState:
        """Describe the index once and persist what was seen.

        ``NotFoundError`` propagates unchanged; durable state is left alone so
        the caller decides whether the index is gone.
        """
        state = self.client.describe_index(name)
        self._persist(state)
        return state

    def update(
        self, name: str, changes: IndexConfiguration | IndexSpec,
    ) -> IndexState:
        """Apply replicas/pod type changes, then read the index once.

        The configure call is not awaited: the returned state may still show
        the index scaling. Passing a full ``IndexSpec`` derives the changes
        from its pod placement.
        """
        if isinstance(changes, IndexSpec):
            placement = _checked(changes).spec
            if not isinstance(placement, PodSpec):
                raise ValidationError(
                    f"index {name!r}: serverless indexes have no mutable fields"
                )
            changes = IndexConfiguration(
                replicas=placement.replicas, pod_type=placement.pod_type,
            )
        if changes.is_empty:
            raise ValidationError(f"index {name!r}: nothing to update")
        try:
            self.client.configure_index(name, changes)
        except PineconeLifecycleError as exc:
            raise UpdateFailed(self._operation("update"), name, str(exc)) from exc
        logger.info("Configured index %r: %s", name, changes.model_dump(exclude_none=True))
        return self.read(name)

    def delete(self, name: str, *, timeout: float | None = None) -> None:
        """Delete the index and wait until describe reports it gone.

        Deleting an index that no longer exists succeeds.
        """
        operation = self._operation("delete")
        budget = timeout if timeout is not None else self.settings.index_delete_timeout
        try:
            self.client.delete_index(name)
        except NotFoundError:
            logger.info("Index %r already absent", name)
        except PineconeLifecycleError as exc:
            raise DeleteFailed(operation, name, str(exc)) from exc
        else:
            logger.info("Deleting index %r, waiting up to %gs", name, budget)

        checkpoint = Checkpoint(self.state)
        try:
            self.poller.until_absent(
                lambda: self.client.describe_index(name),
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

    def list(self) -> list[IndexState]:
        return self.client.list_indexes()

    def import_state(self, name: str) -> IndexState:
        """Start managing an existing index by recording its current state."""
        return self.read(name)

    def apply(
        self,
        spec: IndexSpec,
        *,
        current: IndexState | None = None,
        timeout: float | None = None,
    ) -> IndexState:
        """Reconcile one index: create it, update it, or leave it as is.

        ``current`` is the last persisted observation, ``None`` when the index
        is not managed yet.
        """
        spec = _checked(spec)
        if current is None:
            return self.create(spec, timeout=timeout)
        try:
            observed = self.read(spec.name)
        except NotFoundError:
            logger.info("Index %r vanished remotely, recreating", spec.name)
            return self.create(spec, timeout=timeout)
        reasons = replacement_reasons(spec, observed)
        if reasons:
            raise ValidationError(
                f"index {spec.name!r} requires replacement: {', '.join(reasons)}"
            )
        if isinstance(spec.spec, PodSpec):
            wanted = IndexConfiguration(
                replicas=spec.spec.replicas, pod_type=spec.spec.pod_type,
            )
            if wanted != observed.configuration():
                return self.update(spec.name, wanted)
        return observed

