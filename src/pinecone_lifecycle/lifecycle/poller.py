"""Poll-until-converged / poll-until-absent primitive.

Each iteration runs in a fixed order: probe, checkpoint the observation, then
decide. That ordering keeps the durable record at the last observation even
when the wait times out or is cancelled.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, TypeVar

from pinecone_lifecycle.client.errors import (
    PineconeLifecycleError,
    WaitCancelled,
    WaitTimeout,
)
from pinecone_lifecycle.config.models import LifecycleSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Poller:
    """Repeatedly probes a remote resource until a terminal condition holds.

    The interval starts at ``interval`` and is multiplied by ``backoff`` after
    every probe, capped at ``max_interval``. ``clock`` and ``sleep`` are
    injectable for tests; ``cancel_event`` aborts the wait when set.
    """

    def __init__(
        self,
        *,
        interval: float = 2.0,
        backoff: float = 1.0,
        max_interval: float = 30.0,
        clock: Callable[[], float] | None = None,
        sleep: Callable[[float], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")
        self.interval = interval
        self.backoff = backoff
        self.max_interval = max(max_interval, interval)
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self.cancel_event = cancel_event

    @classmethod
    def from_settings(
        cls,
        settings: LifecycleSettings,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Poller:
        return cls(
            interval=settings.poll_interval,
            backoff=settings.poll_backoff,
            max_interval=settings.max_poll_interval,
            cancel_event=cancel_event,
        )

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _pause(self, delay: float) -> bool:
        """Suspend for ``delay`` seconds; return True if cancelled meanwhile."""
        if self.cancel_event is not None and self._sleep is time.sleep:
            return self.cancel_event.wait(delay)
        self._sleep(delay)
        return self._cancelled()

    def until_converged(
        self,
        probe: Callable[[], T],
        *,
        converged: Callable[[T], bool],
        checkpoint: Callable[[T], None],
        timeout: float,
        operation: str,
        name: str,
    ) -> T:
        """Probe until ``converged`` holds on the latest observation.

        Any error raised by the probe is non-retryable and propagates as is.
        Raises ``WaitTimeout`` carrying the last observation when the budget
        runs out, and ``WaitCancelled`` when the cancel event is set.
        """
        result = self._run(
            probe,
            converged=converged,
            checkpoint=checkpoint,
            absent=None,
            timeout=timeout,
            operation=operation,
            name=name,
        )
        return result  # type: ignore[return-value]

    def until_absent(
        self,
        probe: Callable[[], T],
        *,
        absent: Callable[[PineconeLifecycleError], bool],
        checkpoint: Callable[[T], None],
        timeout: float,
        operation: str,
        name: str,
    ) -> None:
        """Probe until the probe raises an error matching ``absent``.

        Every successful observation means the resource still exists; it is
        checkpointed and the loop continues. Other errors propagate.
        """
        self._run(
            probe,
            converged=lambda _obs: False,
            checkpoint=checkpoint,
            absent=absent,
            timeout=timeout,
            operation=operation,
            name=name,
        )

    def _run(
        self,
        probe: Callable[[], T],
        *,
        converged: Callable[[T], bool],
        checkpoint: Callable[[T], None],
        absent: Optional[Callable[[PineconeLifecycleError], bool]],
        timeout: float,
        operation: str,
        name: str,
    ) -> Optional[T]:
        deadline = self._clock() + timeout
        interval = self.interval
        attempts = 0
        last: Optional[T] = None
        while True:
            if self._cancelled():
                raise WaitCancelled(operation, name, last)
            attempts += 1
            try:
                observation = probe()
            except PineconeLifecycleError as exc:
                if absent is not None and absent(exc):
                    logger.debug("%s %r: absent after %d probes", operation, name, attempts)
                    return None
                raise
            last = observation
            checkpoint(observation)
            if converged(observation):
                logger.debug("%s %r: converged after %d probes", operation, name, attempts)
                return observation
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise WaitTimeout(operation, name, timeout, last, attempts=attempts)
            logger.debug(
                "%s %r: not converged (state: %s), next probe in %.1fs",
                operation, name, getattr(observation, "state_label", None),
                min(interval, remaining),
            )
            if self._pause(min(interval, remaining)):
                raise WaitCancelled(operation, name, last)
            interval = min(interval * self.backoff, self.max_interval)
