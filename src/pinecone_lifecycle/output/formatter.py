"""Output dispatcher — renders observations as table, JSON, YAML, or CSV."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from typing import Any

from rich.console import Console

from pinecone_lifecycle.models.collection import CollectionState
from pinecone_lifecycle.models.index import IndexState
from pinecone_lifecycle.output.tables import (
    COLLECTION_COLUMNS,
    INDEX_COLUMNS,
    collection_row,
    index_row,
    kv_table,
    make_table,
)

console = Console()

FORMATS = ("table", "json", "yaml", "csv")


def to_data(data: Any) -> Any:
    """Convert models (or lists of them) into plain JSON-compatible data."""
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [to_data(item) for item in data]
    return data


def _tabulate(data: Any) -> tuple[list[str], list[list[Any]]] | None:
    items = data if isinstance(data, list) else [data]
    if items and all(isinstance(i, IndexState) for i in items):
        return INDEX_COLUMNS, [index_row(i) for i in items]
    if items and all(isinstance(i, CollectionState) for i in items):
        return COLLECTION_COLUMNS, [collection_row(i) for i in items]
    return None


def output_json(data: Any) -> None:
    console.print_json(json.dumps(to_data(data), indent=2, default=str))


def output_yaml(data: Any) -> None:
    import yaml

    console.print(
        yaml.safe_dump(to_data(data), default_flow_style=False, sort_keys=False), end="",
    )


def output_csv(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(columns)
    writer.writerows([["" if v is None else str(v) for v in row] for row in rows])
    console.print(buf.getvalue(), end="", markup=False)


def output(data: Any, fmt: str = "table", *, title: str | None = None) -> None:
    """Dispatch output to the appropriate formatter.

    A single observation renders as a key-value table; a list renders as one
    row per resource.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unknown format '{fmt}'. Choose from: {', '.join(FORMATS)}")
    if fmt == "json":
        output_json(data)
        return
    if fmt == "yaml":
        output_yaml(data)
        return
    tabular = _tabulate(data)
    if fmt == "csv":
        if tabular:
            output_csv(*tabular)
        else:
            output_json(data)
        return
    if isinstance(data, list):
        if tabular:
            columns, rows = tabular
            state_column = "State" if columns is INDEX_COLUMNS else "Status"
            console.print(make_table(title, columns, rows, state_column=state_column))
        elif not data:
            console.print("[dim]Nothing to show.[/]")
        else:
            output_json(data)
    else:
        plain = to_data(data)
        if isinstance(plain, dict):
            console.print(kv_table(plain, title=title))
        else:
            console.print(plain)
