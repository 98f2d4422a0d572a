import pytest

from hrm_mcp.modules.mcp.selector import (
    TOOL_CATEGORIES,
    select_relevant_tools,
    should_use_sql_tools,
    tool_selection_stats,
)
from hrm_mcp.modules.mcp.tools import (
    all_tools,
    get_tool,
    list_tools,
    strip_schema_descriptions,
    tool_names,
    trim_description,
)


def test_catalog_is_static_and_complete():
    names = tool_names()
    assert len(names) == 18
    assert len(set(names)) == 18
    assert names[-4:] == [
        "get_database_schema",
        "execute_sql_query",
        "get_table_info",
        "explain_sql_query",
    ]
    assert get_tool("execute_sql_query").input_schema["required"] == ["query"]
    assert get_tool("delete_everything") is None


def test_every_category_names_catalog_tools():
    names = set(tool_names())
    for tools in TOOL_CATEGORIES.values():
        assert set(tools) <= names


def test_to_dict_returns_a_copy():
    definition = get_tool("get_employee_info").to_dict()
    definition["inputSchema"]["properties"].clear()
    assert get_tool("get_employee_info").input_schema["properties"]


def test_trim_description():
    assert trim_description("short", 140) == "short"
    trimmed = trim_description("word " * 60, 20)
    assert len(trimmed) <= 20
    assert trimmed.endswith("...")


def test_strip_schema_descriptions_is_recursive():
    schema = {
        "type": "object",
        "description": "top",
        "properties": {"filters": {"type": "object", "description": "nested", "properties": {}}},
    }
    assert strip_schema_descriptions(schema) == {
        "type": "object",
        "properties": {"filters": {"type": "object", "properties": {}}},
    }


def test_compact_listing_has_no_schema_descriptions():
    compact = list_tools(compact=True, description_limit=60)
    assert len(compact) == len(all_tools())
    for tool in compact:
        assert len(tool["description"]) <= 60
        assert "description" not in str(tool["inputSchema"])


@pytest.mark.parametrize(
    "query, expected",
    [
        ("show me employee salaries with their skills", True),
        ("average tenure per department", True),
        ("who is on leave tomorrow", False),
    ],
)
def test_should_use_sql_tools(query, expected):
    assert should_use_sql_tools(query) is expected


def test_sql_questions_get_sql_and_employee_tools():
    selected = [tool.name for tool in select_relevant_tools("show me employee salaries with their skills")]
    assert selected == [
        "get_employee_info",
        "get_department_employees",
        "search_employees",
        "get_departments",
        "get_database_schema",
        "execute_sql_query",
        "get_table_info",
        "explain_sql_query",
    ]


def test_unmatched_query_falls_back_to_employee_tools():
    selected = {tool.name for tool in select_relevant_tools("hello there")}
    assert selected == {
        "get_employee_info",
        "get_department_employees",
        "search_employees",
        "get_departments",
    }


def test_leave_query_keeps_core_tools():
    selected = {tool.name for tool in select_relevant_tools("Approve my vacation")}
    assert {"get_leave_requests", "create_leave_request"} <= selected
    assert {"get_departments", "search_employees"} <= selected
    assert "execute_sql_query" not in selected


def test_report_query_adds_employee_tools():
    selected = {tool.name for tool in select_relevant_tools("Build a recruitment report")}
    assert {"generate_dynamic_report", "get_job_openings", "get_employee_info"} <= selected


def test_selection_stats():
    stats = tool_selection_stats("Show the attendance trend")
    assert stats["totalCount"] == 18
    assert stats["categories"] == ["attendance", "insights"]
    assert stats["tokensEstimate"] == stats["selectedCount"] * 150
