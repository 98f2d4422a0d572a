"""Keyword-based narrowing of the tool catalog for a chat turn."""

from __future__ import annotations

from typing import Any

from loguru import logger

from .tools import ToolDefinition, all_tools

TOKENS_PER_TOOL = 150

TOOL_CATEGORIES: dict[str, tuple[str, ...]] = {
    "core": ("get_departments", "search_employees"),
    "employee": (
        "get_employee_info",
        "get_department_employees",
        "search_employees",
        "get_departments",
    ),
    "sql": (
        "get_database_schema",
        "execute_sql_query",
        "get_table_info",
        "explain_sql_query",
    ),
    "report": ("generate_dynamic_report", "generate_quick_report"),
    "attendance": ("get_attendance_summary", "get_hyper_insights"),
    "leave": ("get_leave_requests", "create_leave_request"),
    "recruitment": ("get_job_openings", "get_candidates"),
    "performance": ("get_performance_reviews", "get_employee_goals"),
    "insights": ("get_hyper_insights",),
}

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "sql": (
        "skills", "skill", "competenc", "salary", "salaries", "pay", "compensation",
        "join", "complex", "calculate", "aggregate", "group by", "average",
        "total", "sum", "count", "multiple tables", "relationship",
    ),
    "report": (
        "report", "dashboard", "summary", "overview", "analytics",
        "generate", "create report", "export", "pdf", "markdown",
    ),
    "attendance": (
        "attendance", "present", "absent", "late", "check-in", "check in",
        "working hours", "time tracking", "punctuality",
    ),
    "leave": (
        "leave", "vacation", "time off", "pto", "absence", "holiday",
        "leave request", "leave balance", "apply leave",
    ),
    "recruitment": (
        "job", "opening", "candidate", "applicant", "hiring", "recruit",
        "interview", "application", "job posting",
    ),
    "performance": (
        "performance", "review", "appraisal", "feedback", "goal", "objective",
        "kpi", "rating", "evaluation",
    ),
    "employee": (
        "employee", "staff", "worker", "team member", "personnel",
        "department", "designation", "role", "position",
    ),
    "insights": (
        "insight", "pattern", "trend", "analysis", "missing", "incomplete",
        "pending", "quick stats", "statistics",
    ),
}

SQL_INDICATORS = (
    "skills", "skill", "competenc", "salary", "salaries", "pay",
    "compensation", "calculate", "aggregate", "average", "total",
)

# Entity pairs the fixed tools cannot join on their own
SQL_ENTITY_PAIRS = (
    ("employee", "skill"),
    ("employee", "salary"),
    ("employee", "competenc"),
    ("department", "salary"),
)


def should_use_sql_tools(query: str) -> bool:
    text = query.lower()
    if any(first in text and second in text for first, second in SQL_ENTITY_PAIRS):
        return True
    if "with their" in text and ("skill" in text or "pay" in text):
        return True
    return any(indicator in text for indicator in SQL_INDICATORS)


def matched_categories(query: str) -> list[str]:
    text = query.lower()
    return [
        category
        for category, keywords in CATEGORY_KEYWORDS.items()
        if any(keyword in text for keyword in keywords)
    ]


def selected_categories(query: str) -> set[str]:
    categories = {"core"}
    if should_use_sql_tools(query):
        categories.update(("sql", "employee"))
    categories.update(matched_categories(query))

    if categories == {"core"}:
        categories.add("employee")
    if "report" in categories:
        categories.add("employee")
    return categories


def select_relevant_tools(query: str) -> list[ToolDefinition]:
    """
    Subset of the catalog relevant to ``query``.

    Matching is case-insensitive substring search. ``core`` tools are always
    present and the result keeps catalog order without duplicates. Queries
    phrased without any known keyword only get the employee tools.
    """
    names: set[str] = set()
    for category in selected_categories(query):
        names.update(TOOL_CATEGORIES[category])

    selected = [tool for tool in all_tools() if tool.name in names]
    logger.debug(f"Tool selection: {len(selected)}/{len(all_tools())} tools for query")
    return selected


def tool_selection_stats(query: str) -> dict[str, Any]:
    selected = select_relevant_tools(query)
    return {
        "selectedCount": len(selected),
        "totalCount": len(all_tools()),
        "categories": matched_categories(query),
        "tokensEstimate": len(selected) * TOKENS_PER_TOOL,
    }
