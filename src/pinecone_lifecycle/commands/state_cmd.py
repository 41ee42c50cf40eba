"""State commands — inspect and edit the local record of managed resources."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from pinecone_lifecycle.client.errors import error_handler
from pinecone_lifecycle.commands._common import FormatOpt, StateOpt, open_store
from pinecone_lifecycle.models.collection import CollectionState
from pinecone_lifecycle.models.index import IndexState
from pinecone_lifecycle.output.formatter import output
from pinecone_lifecycle.state.store import KINDS

app = typer.Typer(name="state", help="Inspect the recorded state of managed resources.")
console = Console()

_MODELS = {"index": IndexState, "collection": CollectionState}
_TITLES = {"index": "Managed indexes", "collection": "Managed collections"}

KindArg = Annotated[str, typer.Argument(help="Resource kind: index or collection")]


def _check_kind(kind: str) -> str:
    if kind not in KINDS:
        raise ValueError(f"Unknown kind '{kind}'. Choose from: {', '.join(KINDS)}")
    return kind


@app.command("list")
@error_handler
def list_state(
    kind: Annotated[
        str | None,
        typer.Option("--kind", "-k", help="Only this kind: index or collection"),
    ] = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """List recorded resources (no remote calls)."""
    store = open_store(state)
    kinds = [_check_kind(kind)] if kind else list(KINDS)
    for k in kinds:
        records = [
            _MODELS[k].model_validate(record) for record in store.list(k).values()
        ]
        output(records, fmt, title=_TITLES[k])


@app.command()
@error_handler
def show(
    kind: KindArg,
    name: Annotated[str, typer.Argument(help="Resource name")],
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Show the last recorded observation of a resource."""
    store = open_store(state)
    record = store.load_model(_MODELS[_check_kind(kind)], name)
    if record is None:
        console.print(f"[red]No {kind} '{name}' in {store.path}.[/]")
        raise typer.Exit(1)
    output(record, fmt, title=f"{kind.capitalize()}: {name}")


@app.command()
@error_handler
def forget(
    kind: KindArg,
    name: Annotated[str, typer.Argument(help="Resource name")],
    state: StateOpt = None,
) -> None:
    """Stop managing a resource without touching it remotely."""
    store = open_store(state)
    if store.load(_check_kind(kind), name) is None:
        console.print(f"[red]No {kind} '{name}' in {store.path}.[/]")
        raise typer.Exit(1)
    store.discard(kind, name)
    console.print(f"[green]Forgot {kind} '{name}'.[/]")
