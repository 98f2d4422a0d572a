"""Markdown preview of query results for LLM consumption."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable

MAX_PREVIEW_ROWS = 10
MAX_CELL_LENGTH = 60
NULL_MARKER = "_NULL_"


@dataclass
class FormattedResult:
    markdown_table: str
    summary: str
    preview_row_count: int
    columns: list[str] = field(default_factory=list)


def format_rows(rows: list[dict[str, Any]] | None) -> FormattedResult:
    """
    Build a bounded preview of ``rows``.

    Only the first ``MAX_PREVIEW_ROWS`` rows are rendered. Rows may have
    different keys; the column list is the union over the preview window in
    order of first appearance.
    """
    if not rows:
        return FormattedResult(
            markdown_table="_No rows returned._",
            summary="Query executed successfully but no rows returned.",
            preview_row_count=0,
            columns=[],
        )

    preview = rows[:MAX_PREVIEW_ROWS]
    columns = extract_columns(preview)
    if len(rows) > MAX_PREVIEW_ROWS:
        summary = (
            f"Returned {len(rows)} row(s). "
            f"Showing first {MAX_PREVIEW_ROWS} rows for preview."
        )
    else:
        summary = f"Returned {len(rows)} row(s)."

    return FormattedResult(
        markdown_table=build_markdown_table(columns, preview),
        summary=summary,
        preview_row_count=len(preview),
        columns=columns,
    )


def extract_columns(rows: Iterable[dict[str, Any]]) -> list[str]:
    # dict preserves insertion order, so this is an ordered set
    seen: dict[str, None] = {}
    for row in rows:
        for key in row or {}:
            seen.setdefault(str(key), None)
    return list(seen)


def build_markdown_table(columns: list[str], rows: list[dict[str, Any]]) -> str:
    if not columns:
        return "_Rows returned but column metadata is unavailable._"

    header = "| " + " | ".join(escape_markdown(column) for column in columns) + " |"
    divider = "| " + " | ".join("---" for _ in columns) + " |"
    body = [
        "| " + " | ".join(format_cell((row or {}).get(column)) for column in columns) + " |"
        for row in rows
    ]
    return "\n".join([header, divider, *body])


def format_cell(value: Any) -> str:
    if value is None:
        return NULL_MARKER

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    if isinstance(value, (dict, list, tuple)):
        return escape_markdown(json.dumps(value, default=str, ensure_ascii=False))

    raw = str(value)
    if len(raw) > MAX_CELL_LENGTH:
        raw = raw[: MAX_CELL_LENGTH - 3] + "..."
    return escape_markdown(raw)


def escape_markdown(value: str) -> str:
    return value.replace("|", "\\|").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
