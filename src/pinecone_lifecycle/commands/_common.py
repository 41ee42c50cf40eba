"""Shared helpers for CLI commands — session factory, options, timeouts."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Annotated, Any

import typer

from pinecone_lifecycle.client.control_plane import ControlPlaneClient
from pinecone_lifecycle.config.manager import ConfigManager
from pinecone_lifecycle.config.models import LifecycleSettings
from pinecone_lifecycle.lifecycle.collection import CollectionReconciler
from pinecone_lifecycle.lifecycle.index import IndexReconciler
from pinecone_lifecycle.lifecycle.poller import Poller
from pinecone_lifecycle.state.store import JsonStateStore

# Shared Typer option type aliases
ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Project profile"),
]
UrlOpt = Annotated[
    str | None,
    typer.Option("--url", help="Control plane URL override"),
]
ApiKeyOpt = Annotated[
    str | None,
    typer.Option("--api-key", help="API key override"),
]
StateOpt = Annotated[
    str | None,
    typer.Option("--state", help="State file path"),
]
FormatOpt = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format: table, json, yaml, csv"),
]
TimeoutOpt = Annotated[
    float | None,
    typer.Option("--timeout", min=0, help="Wait budget in seconds (default from config)"),
]


def _get_manager() -> ConfigManager:
    return ConfigManager()


@dataclass
class Session:
    """Everything a command needs to reconcile resources."""

    client: ControlPlaneClient
    store: JsonStateStore
    settings: LifecycleSettings
    poller: Poller

    @property
    def indexes(self) -> IndexReconciler:
        return IndexReconciler(self.client, self.store, self.settings, poller=self.poller)

    @property
    def collections(self) -> CollectionReconciler:
        return CollectionReconciler(
            self.client, self.store, self.settings, poller=self.poller,
        )


@contextmanager
def _cancel_on_sigterm() -> Iterator[threading.Event]:
    """Yield an event that is set when the process receives SIGTERM."""
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    def _handler(signum: int, frame: Any) -> None:
        cancel.set()

    previous = signal.signal(signal.SIGTERM, _handler)
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGTERM, previous)


@contextmanager
def open_session(
    profile: str | None,
    url: str | None,
    api_key: str | None,
    state: str | None = None,
) -> Iterator[Session]:
    """Resolve config, open the client and state store, and wire the poller."""
    mgr = _get_manager()
    project = mgr.resolve_project(profile_name=profile, url=url, api_key=api_key)
    store = JsonStateStore(mgr.resolve_state_file(state))
    settings = mgr.config.lifecycle
    with _cancel_on_sigterm() as cancel, ControlPlaneClient(project) as client:
        poller = Poller.from_settings(settings, cancel_event=cancel)
        yield Session(client=client, store=store, settings=settings, poller=poller)


def open_store(state: str | None) -> JsonStateStore:
    """Open the state store without connecting to the control plane."""
    return JsonStateStore(_get_manager().resolve_state_file(state))
