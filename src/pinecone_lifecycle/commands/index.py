"""Index commands.

create, show, configure, delete, list, import, apply.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console

from pinecone_lifecycle.client.errors import error_handler
from pinecone_lifecycle.commands._common import (
    ApiKeyOpt,
    FormatOpt,
    ProfileOpt,
    StateOpt,
    TimeoutOpt,
    UrlOpt,
    open_session,
)
from pinecone_lifecycle.models.index import IndexConfiguration, IndexSpec, IndexState
from pinecone_lifecycle.output.formatter import output
from pinecone_lifecycle.utils.manifest import parse_spec, read_index_spec

app = typer.Typer(name="index", help="Manage Pinecone indexes.")
console = Console()


def _spec_from_options(
    name: str | None,
    *,
    dimension: int | None,
    metric: str | None,
    environment: str | None,
    pod_type: str | None,
    replicas: int | None,
    shards: int | None,
    pods: int | None,
    indexed: list[str] | None,
    source_collection: str | None,
    cloud: str | None,
    region: str | None,
) -> IndexSpec:
    """Assemble an IndexSpec from flags; placement depends on which flags are set."""
    data: dict[str, Any] = {"name": name, "dimension": dimension}
    if metric:
        data["metric"] = metric
    placement: dict[str, Any] = {}
    if environment:
        pod: dict[str, Any] = {"environment": environment}
        for key, value in (
            ("pod_type", pod_type),
            ("replicas", replicas),
            ("shards", shards),
            ("pods", pods),
            ("source_collection", source_collection),
        ):
            if value is not None:
                pod[key] = value
        if indexed:
            pod["metadata_config"] = {"indexed": indexed}
        placement["pod"] = pod
    if cloud or region:
        placement["serverless"] = {"cloud": cloud, "region": region}
    data["spec"] = placement
    return parse_spec(IndexSpec, data, source="options")


@app.command()
@error_handler
def create(
    name: Annotated[
        str | None, typer.Argument(help="Index name (omit when using --file)"),
    ] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", "-F", help="YAML/JSON index manifest"),
    ] = None,
    dimension: Annotated[int | None, typer.Option("--dimension", "-d")] = None,
    metric: Annotated[
        str | None,
        typer.Option("--metric", help="cosine, euclidean, or dotproduct"),
    ] = None,
    environment: Annotated[
        str | None,
        typer.Option("--environment", help="Pod environment, e.g. us-west4-gcp"),
    ] = None,
    pod_type: Annotated[str | None, typer.Option("--pod-type", help="e.g. s1.x1")] = None,
    replicas: Annotated[int | None, typer.Option("--replicas", min=1)] = None,
    shards: Annotated[int | None, typer.Option("--shards", min=1)] = None,
    pods: Annotated[int | None, typer.Option("--pods", min=1)] = None,
    indexed: Annotated[
        list[str] | None,
        typer.Option("--indexed", help="Metadata field to index (repeatable)"),
    ] = None,
    source_collection: Annotated[
        str | None,
        typer.Option("--source-collection", help="Create from this collection"),
    ] = None,
    cloud: Annotated[
        str | None, typer.Option("--cloud", help="Serverless cloud: aws, gcp, azure"),
    ] = None,
    region: Annotated[str | None, typer.Option("--region", help="Serverless region")] = None,
    timeout: TimeoutOpt = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Create an index and wait until it is ready.

    Use --environment for a pod index or --cloud/--region for a serverless one.
    """
    if file:
        spec = read_index_spec(file)
    else:
        spec = _spec_from_options(
            name,
            dimension=dimension,
            metric=metric,
            environment=environment,
            pod_type=pod_type,
            replicas=replicas,
            shards=shards,
            pods=pods,
            indexed=indexed,
            source_collection=source_collection,
            cloud=cloud,
            region=region,
        )
    with open_session(profile, url, api_key, state) as session:
        result = session.indexes.create(spec, timeout=timeout)
        console.print(f"[green]Index '{spec.name}' created and ready.[/]")
        output(result, fmt, title=f"Index: {spec.name}")


@app.command()
@error_handler
def show(
    name: Annotated[str, typer.Argument(help="Index name")],
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Read an index from the control plane and refresh its state record."""
    with open_session(profile, url, api_key, state) as session:
        result = session.indexes.read(name)
        output(result, fmt, title=f"Index: {name}")


@app.command()
@error_handler
def configure(
    name: Annotated[str, typer.Argument(help="Index name")],
    replicas: Annotated[int | None, typer.Option("--replicas", min=1)] = None,
    pod_type: Annotated[str | None, typer.Option("--pod-type", help="e.g. s1.x2")] = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Change replicas or pod type of a pod index.

    The change is not awaited: the index may keep scaling after this returns.
    """
    changes = parse_spec(
        IndexConfiguration,
        {"replicas": replicas, "pod_type": pod_type},
        source="options",
    )
    with open_session(profile, url, api_key, state) as session:
        result = session.indexes.update(name, changes)
        console.print(
            f"[green]Index '{name}' reconfigured.[/] "
            f"Current state: {result.state_label or 'unknown'}"
        )
        output(result, fmt, title=f"Index: {name}")


@app.command()
@error_handler
def delete(
    name: Annotated[str, typer.Argument(help="Index name")],
    force: Annotated[bool, typer.Option("--force", help="Skip confirmation")] = False,
    timeout: TimeoutOpt = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
) -> None:
    """Delete an index and wait until it is gone."""
    if not force:
        from rich.prompt import Confirm

        if not Confirm.ask(f"Delete index '{name}'? All vectors will be lost"):
            console.print("Cancelled.")
            return
    with open_session(profile, url, api_key, state) as session:
        session.indexes.delete(name, timeout=timeout)
        console.print(f"[green]Index '{name}' deleted.[/]")


@app.command("list")
@error_handler
def list_indexes(
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """List all indexes in the project."""
    with open_session(profile, url, api_key) as session:
        output(session.indexes.list(), fmt, title="Indexes")


@app.command("import")
@error_handler
def import_index(
    name: Annotated[str, typer.Argument(help="Index name")],
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Start managing an existing index."""
    with open_session(profile, url, api_key, state) as session:
        result = session.indexes.import_state(name)
        console.print(f"[green]Index '{name}' imported.[/]")
        output(result, fmt, title=f"Index: {name}")


@app.command()
@error_handler
def apply(
    file: Annotated[Path, typer.Argument(help="YAML/JSON index manifest")],
    timeout: TimeoutOpt = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    api_key: ApiKeyOpt = None,
    state: StateOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Create or update an index so it matches a manifest."""
    spec = read_index_spec(file)
    with open_session(profile, url, api_key, state) as session:
        current = session.store.load_model(IndexState, spec.name)
        result = session.indexes.apply(spec, current=current, timeout=timeout)
        console.print(f"[green]Index '{spec.name}' reconciled.[/]")
        output(result, fmt, title=f"Index: {spec.name}")
