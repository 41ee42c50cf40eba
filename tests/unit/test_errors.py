"""Tests for error_handler and custom exceptions."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from pinecone_lifecycle.client.errors import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    ControlPlaneAPIError,
    ControlPlaneConnectionError,
    CreateFailed,
    DeleteFailed,
    ErrorKind,
    LifecycleError,
    NotFoundError,
    PineconeLifecycleError,
    StateStoreError,
    TransportError,
    UpdateFailed,
    ValidationError,
    WaitCancelled,
    WaitTimeout,
    error_handler,
)


@dataclass
class Seen:
    state_label: str


class TestExceptionHierarchy:
    def test_base_error(self):
        exc = PineconeLifecycleError("test")
        assert str(exc) == "test"
        assert exc.exit_code == 1

    def test_connection_error(self):
        exc = ControlPlaneConnectionError("cannot connect")
        assert isinstance(exc, TransportError)
        assert exc.exit_code == 2
        assert exc.kind is ErrorKind.TRANSPORT

    def test_auth_error(self):
        exc = AuthenticationError("denied")
        assert isinstance(exc, TransportError)
        assert exc.exit_code == 3

    def test_not_found_error(self):
        exc = NotFoundError("missing")
        assert exc.exit_code == 4
        assert exc.kind is ErrorKind.NOT_FOUND

    def test_conflict_error(self):
        exc = ConflictError("conflict")
        assert exc.exit_code == 5
        assert exc.kind is ErrorKind.VALIDATION

    def test_configuration_error(self):
        exc = ConfigurationError("no key")
        assert exc.exit_code == 6
        assert exc.kind is ErrorKind.VALIDATION

    def test_state_store_error(self):
        exc = StateStoreError("disk full")
        assert exc.exit_code == 10
        assert isinstance(exc, PineconeLifecycleError)

    def test_validation_error(self):
        exc = ValidationError("name too long")
        assert exc.exit_code == 7
        assert exc.detail == "name too long"
        assert str(exc) == "Validation error: name too long"

    def test_validation_error_empty(self):
        assert str(ValidationError()) == "Validation error"

    def test_api_error(self):
        exc = ControlPlaneAPIError(500, "server error")
        assert isinstance(exc, TransportError)
        assert exc.status_code == 500
        assert str(exc) == "Control plane returned 500: server error"


class TestLifecycleErrors:
    def test_message_with_last_state(self):
        exc = CreateFailed("create index", "widget", "boom", last_state="Initializing")
        assert str(exc) == "create index 'widget' failed: boom (last state: Initializing)"
        assert exc.exit_code == 8

    def test_message_without_last_state(self):
        exc = DeleteFailed("delete collection", "snap", "rejected")
        assert str(exc) == "delete collection 'snap' failed: rejected"
        assert exc.last_state is None

    def test_subclasses(self):
        for cls in (CreateFailed, UpdateFailed, DeleteFailed):
            assert issubclass(cls, LifecycleError)

    def test_wait_timeout(self):
        exc = WaitTimeout("delete index", "widget", 2, Seen("Terminating"), attempts=3)
        assert exc.exit_code == 9
        assert exc.last_state == "Terminating"
        assert exc.observation == Seen("Terminating")
        assert str(exc) == (
            "delete index 'widget' failed: not converged after 2s (3 probes)"
            " (last state: Terminating)"
        )

    def test_wait_timeout_without_observation(self):
        exc = WaitTimeout("create index", "widget", 0.5)
        assert exc.last_state is None
        assert "0.5s" in str(exc)

    def test_wait_cancelled(self):
        exc = WaitCancelled("create collection", "snap", Seen("Initializing"))
        assert exc.exit_code == 130
        assert exc.last_state == "Initializing"


class TestErrorHandler:
    def test_catches_lifecycle_error(self):
        @error_handler
        def raises_auth():
            raise AuthenticationError("bad key")

        with pytest.raises(SystemExit) as exc_info:
            raises_auth()
        assert exc_info.value.code == 3

    def test_catches_wait_timeout(self):
        @error_handler
        def times_out():
            raise WaitTimeout("create index", "widget", 1)

        with pytest.raises(SystemExit) as exc_info:
            times_out()
        assert exc_info.value.code == 9

    def test_catches_value_error(self):
        @error_handler
        def bad_format():
            raise ValueError("Unknown format 'xml'")

        with pytest.raises(SystemExit) as exc_info:
            bad_format()
        assert exc_info.value.code == 1

    def test_keyboard_interrupt(self):
        @error_handler
        def interrupted():
            raise KeyboardInterrupt

        with pytest.raises(SystemExit) as exc_info:
            interrupted()
        assert exc_info.value.code == 130

    def test_passes_through_normal_return(self):
        @error_handler
        def returns_value():
            return 42

        assert returns_value() == 42

    def test_does_not_catch_other_exceptions(self):
        @error_handler
        def raises_type_error():
            raise TypeError("bad type")

        with pytest.raises(TypeError):
            raises_type_error()
