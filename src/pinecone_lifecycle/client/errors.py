"""Typed exceptions and error handling decorator."""

from __future__ import annotations

import enum
import functools
from typing import Any, Callable, TypeVar

from rich.console import Console

F = TypeVar("F", bound=Callable[..., Any])

err_console = Console(stderr=True)


class ErrorKind(str, enum.Enum):
    """Classification assigned to an error at the client boundary."""

    NOT_FOUND = "not-found"
    TRANSPORT = "transport"
    VALIDATION = "validation"


class PineconeLifecycleError(Exception):
    """Base exception for pinecone-lifecycle."""

    exit_code: int = 1
    kind: ErrorKind = ErrorKind.TRANSPORT


class TransportError(PineconeLifecycleError):
    """Network or server failure talking to the control plane."""


class ControlPlaneConnectionError(TransportError):
    """Cannot connect to the control plane."""

    exit_code = 2


class AuthenticationError(TransportError):
    """Authentication failed (401/403)."""

    exit_code = 3


class NotFoundError(PineconeLifecycleError):
    """Resource not found (404)."""

    exit_code = 4
    kind = ErrorKind.NOT_FOUND


class ConfigurationError(PineconeLifecycleError):
    """CLI configuration is missing or invalid."""

    exit_code = 6
    kind = ErrorKind.VALIDATION


class StateStoreError(PineconeLifecycleError):
    """The state file could not be read or written."""

    exit_code = 10


class ValidationError(PineconeLifecycleError):
    """A spec or request was rejected as invalid."""

    exit_code = 7
    kind = ErrorKind.VALIDATION

    def __init__(self, detail: str = "") -> None:
        super().__init__(f"Validation error: {detail}" if detail else "Validation error")
        self.detail = detail


class ConflictError(PineconeLifecycleError):
    """Resource conflict (409), e.g. the name is already taken."""

    exit_code = 5
    kind = ErrorKind.VALIDATION


class ControlPlaneAPIError(TransportError):
    """Generic API error from the control plane."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        super().__init__(f"Control plane returned {status_code}: {detail}")


class LifecycleError(PineconeLifecycleError):
    """An operation on a managed resource did not complete.

    Carries the operation name, the resource identity and the last state label
    observed from the backend, so failures can be diagnosed without another
    describe call.
    """

    exit_code = 8

    def __init__(
        self,
        operation: str,
        name: str,
        reason: str,
        *,
        last_state: str | None = None,
    ) -> None:
        self.operation = operation
        self.name = name
        self.reason = reason
        self.last_state = last_state
        message = f"{operation} {name!r} failed: {reason}"
        if last_state is not None:
            message += f" (last state: {last_state})"
        super().__init__(message)


class CreateFailed(LifecycleError):
    """The create request was rejected, or the wait aborted on an error."""


class UpdateFailed(LifecycleError):
    """The configure request was rejected."""


class DeleteFailed(LifecycleError):
    """The delete request was rejected, or the wait aborted on an error."""


class WaitTimeout(LifecycleError):
    """Convergence or absence was not reached within the time budget."""

    exit_code = 9

    def __init__(
        self,
        operation: str,
        name: str,
        timeout: float,
        observation: Any = None,
        *,
        attempts: int = 0,
    ) -> None:
        self.timeout = timeout
        self.observation = observation
        self.attempts = attempts
        last_state = getattr(observation, "state_label", None)
        super().__init__(
            operation,
            name,
            f"not converged after {timeout:g}s ({attempts} probes)",
            last_state=last_state,
        )


class WaitCancelled(LifecycleError):
    """The wait was aborted by an external cancellation signal."""

    exit_code = 130

    def __init__(self, operation: str, name: str, observation: Any = None) -> None:
        self.observation = observation
        super().__init__(
            operation,
            name,
            "cancelled",
            last_state=getattr(observation, "state_label", None),
        )


def error_handler(func: F) -> F:
    """Decorator that catches PineconeLifecycleError and prints user-friendly messages."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except PineconeLifecycleError as exc:
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(exc.exit_code)
        except ValueError as exc:
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(1)
        except KeyboardInterrupt:
            err_console.print("[yellow]Interrupted.[/] State kept at the last observation.")
            raise SystemExit(130)

    return wrapper  # type: ignore[return-value]
