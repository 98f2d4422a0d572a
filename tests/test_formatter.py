from datetime import date, datetime

from hrm_mcp.modules.mcp.formatter import (
    MAX_PREVIEW_ROWS,
    NULL_MARKER,
    format_cell,
    format_rows,
)


def test_empty_rows():
    result = format_rows([])
    assert result.markdown_table == "_No rows returned._"
    assert result.summary == "Query executed successfully but no rows returned."
    assert result.preview_row_count == 0
    assert result.columns == []


def test_none_rows():
    assert format_rows(None).preview_row_count == 0


def test_small_result_is_fully_rendered():
    result = format_rows([{"name": "Alice", "age": 30}, {"name": "Bob", "age": None}])
    assert result.summary == "Returned 2 row(s)."
    assert result.columns == ["name", "age"]
    assert result.markdown_table.splitlines() == [
        "| name | age |",
        "| --- | --- |",
        "| Alice | 30 |",
        f"| Bob | {NULL_MARKER} |",
    ]


def test_preview_is_capped():
    rows = [{"n": index} for index in range(15)]
    result = format_rows(rows)
    assert result.preview_row_count == MAX_PREVIEW_ROWS
    assert result.summary == "Returned 15 row(s). Showing first 10 rows for preview."
    # header + divider + preview rows
    assert len(result.markdown_table.splitlines()) == MAX_PREVIEW_ROWS + 2


def test_columns_are_union_in_first_seen_order():
    result = format_rows([{"a": 1}, {"b": 2, "a": 3}])
    assert result.columns == ["a", "b"]
    assert result.markdown_table.splitlines()[2] == f"| 1 | {NULL_MARKER} |"


def test_columns_ignore_keys_first_seen_after_the_preview():
    rows = [{"id": index, "name": f"row {index}"} for index in range(10)]
    rows += [{"id": index, "name": f"row {index}", "late": True} for index in range(10, 15)]
    result = format_rows(rows)
    assert result.columns == ["id", "name"]
    assert "late" not in result.markdown_table
    assert result.summary == "Returned 15 row(s). Showing first 10 rows for preview."


def test_cells_are_escaped_and_truncated():
    assert format_cell("a|b\nc") == "a\\|b c"
    long_value = "x" * 100
    assert format_cell(long_value) == "x" * 57 + "..."


def test_temporal_and_structured_cells():
    assert format_cell(date(2025, 1, 31)) == "2025-01-31"
    assert format_cell(datetime(2025, 1, 31, 9, 30)) == "2025-01-31T09:30:00"
    assert format_cell({"k": [1, 2]}) == '{"k": [1, 2]}'
