"""Rich table rendering for indexes, collections, and key-value records."""

from __future__ import annotations

from typing import Any, Sequence

from rich.table import Table

from pinecone_lifecycle.models.collection import CollectionState
from pinecone_lifecycle.models.index import IndexState, PodSpec

INDEX_COLUMNS = ["Name", "Dimension", "Metric", "Placement", "State", "Ready", "Host"]
COLLECTION_COLUMNS = ["Name", "Source", "Status", "Size", "Vectors"]


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _state_style(label: str | None) -> str:
    if label == "Ready":
        return "green"
    if label in ("Terminating", "InitializationFailed"):
        return "red"
    return "yellow"


def placement_summary(state: IndexState) -> str:
    spec = state.spec
    if isinstance(spec, PodSpec):
        return f"pod {spec.environment} {spec.pod_type} x{spec.replicas}"
    return f"serverless {spec.cloud.value}/{spec.region}"


def index_row(state: IndexState) -> list[Any]:
    return [
        state.name,
        state.dimension,
        state.metric.value,
        placement_summary(state),
        state.state_label,
        state.ready,
        state.host,
    ]


def collection_row(state: CollectionState) -> list[Any]:
    return [state.name, state.source, state.status, state.size, state.vector_count]


def make_table(
    title: str | None,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    *,
    state_column: str | None = None,
) -> Table:
    """Build a Rich Table, coloring ``state_column`` by its label."""
    table = Table(title=title)
    for col in columns:
        table.add_column(col, no_wrap=col in ("Name", "Host"))
    state_at = columns.index(state_column) if state_column in columns else None
    for row in rows:
        cells = [_cell(v) for v in row]
        if state_at is not None and cells[state_at]:
            style = _state_style(cells[state_at])
            cells[state_at] = f"[{style}]{cells[state_at]}[/]"
        table.add_row(*cells)
    return table


def kv_table(data: dict[str, Any], *, title: str | None = None) -> Table:
    """Render a record as a two-column table, flattening nested mappings."""
    table = Table(title=title, show_header=False)
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in _flatten(data):
        table.add_row(key, _cell(value))
    return table


def _flatten(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    items: list[tuple[str, Any]] = []
    for key, value in data.items():
        label = f"{prefix}{key}"
        if isinstance(value, dict) and value:
            items.extend(_flatten(value, f"{label}."))
        else:
            items.append((label, value))
    return items
