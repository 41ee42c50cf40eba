"""Collection commands.

create, show, configure, delete, list, import, apply.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from pinecone_lifecycle.client.errors import error_handler
from pinecone_lifecycle.commands._common import (
    ApiKeyOpt,
    FormatOpt,
    ProfileOpt,
    Session,
    StateOpt,
    TimeoutOpt,
    UrlOpt,
    open_session,
)
from pinecone_lifecycle.models.collection import CollectionSpec, CollectionState
from pinecone_lifecycle.output.formatter import output
from pinecone_lifecycle.utils.manifest import parse_spec, read_collection_spec

app = typer.Typer(name="collection", help="Manage Pinecone collections.")
console = Console()


def _known_source(session: Session, name: str) -> str | None:
    """The source index recorded for a managed collection, if any."""
    recorded = session.store.load_model(CollectionState, name)
    return recorded.source if recorded else None


@app.command()
@error_handler
def create(
    name: Annotated[
        str | None, typer.Argument(help="Collection name (omit when using --file)"),
    ] = None,
    source: Annotated[
        str | None, typer.Option("--source", "-s", help="Source index name"),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-F", help="YAML/JSON collection manifest"),
    ] = None,
    timeout: TimeoutOpt = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Snapshot an index into a collection and wait until it is ready."""
    if file:
        spec = read_collection_spec(file)
    else:
        spec = parse_spec(
            CollectionSpec, {"name": name, "source": source}, source="options",
        )
    with open_session(profile, url, api_key, state) as session:
        result = session.collections.create(spec, timeout=timeout)
        console.print(f"[green]Collection '{spec.name}' created and ready.[/]")
        output(result, fmt, title=f"Collection: {spec.name}")


@app.command()
@error_handler
def show(
    name: Annotated[str, typer.Argument(help="Collection name")],
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Read a collection from the control plane and refresh its state record."""
    with open_session(profile, url, api_key, state) as session:
        result = session.collections.read(name, source=_known_source(session, name))
        output(result, fmt, title=f"Collection: {name}")


@app.command()
@error_handler
def configure(
    name: Annotated[str, typer.Argument(help="Collection name")],
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Collections are immutable; this only refreshes the state record."""
    with open_session(profile, url, api_key, state) as session:
        result = session.collections.update(name, source=_known_source(session, name))
        console.print(
            f"[yellow]Collections cannot be modified.[/] '{name}' refreshed."
        )
        output(result, fmt, title=f"Collection: {name}")


@app.command()
@error_handler
def delete(
    name: Annotated[str, typer.Argument(help="Collection name")],
    force: Annotated[bool, typer.Option("--force", help="Skip confirmation")] = False,
    timeout: TimeoutOpt = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
) -> None:
    """Delete a collection and wait until it is gone."""
    if not force:
        from rich.prompt import Confirm

        if not Confirm.ask(f"Delete collection '{name}'? This cannot be undone"):
            console.print("Cancelled.")
            return
    with open_session(profile, url, api_key, state) as session:
        session.collections.delete(
            name, timeout=timeout, source=_known_source(session, name),
        )
        console.print(f"[green]Collection '{name}' deleted.[/]")


@app.command("list")
@error_handler
def list_collections(
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """List all collections in the project."""
    with open_session(profile, url, api_key) as session:
        output(session.collections.list(), fmt, title="Collections")


@app.command("import")
@error_handler
def import_collection(
    name: Annotated[str, typer.Argument(help="Collection name")],
    source: Annotated[
        str | None, typer.Option("--source", "-s", help="Source index name, if known"),
    ] = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Start managing an existing collection."""
    with open_session(profile, url, api_key, state) as session:
        result = session.collections.import_state(name, source=source)
        console.print(f"[green]Collection '{name}' imported.[/]")
        output(result, fmt, title=f"Collection: {name}")


@app.command()
@error_handler
def apply(
    file: Annotated[Path, typer.Argument(help="YAML/JSON collection manifest")],
    timeout: TimeoutOpt = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Create a collection from a manifest unless it is already managed."""
    spec = read_collection_spec(file)
    with open_session(profile, url, api_key, state) as session:
        current = session.store.load_model(CollectionState, spec.name)
        result = session.collections.apply(spec, current=current, timeout=timeout)
        console.print(f"[green]Collection '{spec.name}' reconciled.[/]")
        output(result, fmt, title=f"Collection: {spec.name}")
