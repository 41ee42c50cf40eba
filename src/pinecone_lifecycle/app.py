"""Root Typer app — global flags, logging setup, command groups."""

from __future__ import annotations

from typing import Optional

import typer

from pinecone_lifecycle import __version__
from pinecone_lifecycle.commands import collection, config_cmd, index, state_cmd
from pinecone_lifecycle.utils.log import configure_logging

app = typer.Typer(
    name="pinecone-lifecycle",
    help="Drive Pinecone indexes and collections to a desired state and wait for them to settle.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

for _group in (index, collection, state_cmd, config_cmd):
    app.add_typer(_group.app, name=_group.app.info.name)


def _print_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"pinecone-lifecycle {__version__}")
    raise typer.Exit()


@app.callback()
def main_callback(
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Log progress (-v) or every poll (-vv).",
    ),
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=_print_version, is_eager=True,
        help="Print the version and exit.",
    ),
) -> None:
    """Manage the lifecycle of Pinecone indexes and collections."""
    configure_logging(verbose)


def main() -> None:
    app()
