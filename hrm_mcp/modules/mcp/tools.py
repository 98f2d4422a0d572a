"""Static catalog of the MCP tools exposed to the AI providers."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

DEFAULT_DESCRIPTION_LIMIT = 140


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(self.input_schema),
        }


def _object(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _string(description: str | None = None, **extra: Any) -> dict[str, Any]:
    prop: dict[str, Any] = {"type": "string", **extra}
    if description:
        prop["description"] = description
    return prop


def _boolean(description: str, default: bool) -> dict[str, Any]:
    return {"type": "boolean", "description": description, "default": default}


def _limit(default: int, description: str = "Maximum number of results") -> dict[str, Any]:
    return {"type": "integer", "description": description, "default": default, "minimum": 1}


_TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="get_employee_info",
        description=(
            "Get detailed information about an employee by ID or email. Returns employee "
            "profile, department, designation, and employment details."
        ),
        input_schema=_object(
            {
                "identifier": _string("Employee ID (UUID) or email address"),
                "includeAttendance": _boolean("Include recent attendance data", False),
            },
            required=["identifier"],
        ),
    ),
    ToolDefinition(
        name="get_department_employees",
        description="Get a list of all employees in a specific department with their basic information.",
        input_schema=_object(
            {
                "departmentId": _string("Department UUID"),
                "includeInactive": _boolean("Include inactive employees", False),
            },
            required=["departmentId"],
        ),
    ),
    ToolDefinition(
        name="search_employees",
        description=(
            "Search for employees by name, email, department, or designation. "
            "Supports partial matching."
        ),
        input_schema=_object(
            {
                "query": _string("Search query (name, email, etc.)"),
                "filters": {
                    "type": "object",
                    "description": "Optional filters",
                    "properties": {
                        "departmentId": _string(),
                        "designationId": _string(),
                        "locationId": _string(),
                    },
                },
                "limit": _limit(10),
            },
            required=["query"],
        ),
    ),
    ToolDefinition(
        name="get_attendance_summary",
        description=(
            "Get attendance summary for a date range. Can filter by employee, department, "
            "or get company-wide statistics."
        ),
        input_schema=_object(
            {
                "startDate": _string("Start date (ISO format)"),
                "endDate": _string("End date (ISO format)"),
                "employeeId": _string("Optional: specific employee UUID"),
                "departmentId": _string("Optional: specific department UUID"),
            },
            required=["startDate", "endDate"],
        ),
    ),
    ToolDefinition(
        name="get_leave_requests",
        description="Get leave requests with optional filters for status, employee, or date range.",
        input_schema=_object(
            {
                "status": _string(
                    "Filter by leave status",
                    enum=["pending", "approved", "rejected", "cancelled"],
                ),
                "employeeId": _string("Filter by employee UUID"),
                "startDate": _string("Filter from this date"),
                "endDate": _string("Filter until this date"),
                "limit": _limit(20),
            }
        ),
    ),
    ToolDefinition(
        name="get_job_openings",
        description=(
            "Get active job openings with details about required skills, department, "
            "and application statistics."
        ),
        input_schema=_object(
            {
                "departmentId": _string("Filter by department UUID"),
                "status": _string(
                    "Filter by job opening status", enum=["open", "closed", "on_hold"]
                ),
                "includeApplications": _boolean(
                    "Include candidate application statistics", False
                ),
            }
        ),
    ),
    ToolDefinition(
        name="get_candidates",
        description=(
            "Get candidates for recruitment. Can filter by job opening, status, "
            "or search by skills."
        ),
        input_schema=_object(
            {
                "jobOpeningId": _string("Filter by job opening UUID"),
                "status": _string(
                    "Filter by candidate status (applied, screening, interview, etc.)"
                ),
                "skills": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Filter by required skills",
                },
                "limit": _limit(20),
            }
        ),
    ),
    ToolDefinition(
        name="get_performance_reviews",
        description=(
            "Get performance reviews for employees. Can filter by employee, "
            "review period, or status."
        ),
        input_schema=_object(
            {
                "employeeId": _string("Filter by employee UUID"),
                "reviewPeriod": _string("Review period (e.g., Q1 2025, Annual 2024)"),
                "status": _string(enum=["draft", "submitted", "completed"]),
            }
        ),
    ),
    ToolDefinition(
        name="get_hyper_insights",
        description=(
            "Get intelligent insights from the HYPER agentic layer. This provides automated "
            "HR analytics like missing documents, incomplete onboarding, attendance "
            "patterns, etc."
        ),
        input_schema=_object(
            {
                "insightType": _string(
                    "Type of insight to retrieve",
                    enum=[
                        "missing_documents",
                        "incomplete_onboarding",
                        "attendance_summary",
                        "absentee_patterns",
                        "recruitment_pipeline",
                        "pending_feedback",
                        "quick_stats",
                    ],
                ),
                "filters": {
                    "type": "object",
                    "description": "Optional filters specific to the insight type",
                    "properties": {
                        "departmentId": _string(),
                        "days": {"type": "integer"},
                        "date": _string(),
                        "startDate": _string(),
                        "endDate": _string(),
                    },
                },
            },
            required=["insightType"],
        ),
    ),
    ToolDefinition(
        name="get_departments",
        description="Get list of all departments in the organization with employee counts.",
        input_schema=_object(
            {
                "includeEmployeeCount": _boolean(
                    "Include number of employees in each department", True
                ),
            }
        ),
    ),
    ToolDefinition(
        name="create_leave_request",
        description=(
            "Create a new leave request for an employee. Requires employee ID, leave type, "
            "dates, and reason."
        ),
        input_schema=_object(
            {
                "employeeId": _string("Employee UUID"),
                "leaveTypeId": _string("Leave type UUID"),
                "startDate": _string("Leave start date (ISO format)"),
                "endDate": _string("Leave end date (ISO format)"),
                "reason": _string("Reason for leave"),
            },
            required=["employeeId", "leaveTypeId", "startDate", "endDate", "reason"],
        ),
    ),
    ToolDefinition(
        name="get_employee_goals",
        description="Get goals and objectives for an employee with progress tracking.",
        input_schema=_object(
            {
                "employeeId": _string("Employee UUID"),
                "status": _string(
                    "Filter by goal status", enum=["active", "completed", "overdue"]
                ),
            },
            required=["employeeId"],
        ),
    ),
    ToolDefinition(
        name="generate_dynamic_report",
        description=(
            "Generate a comprehensive HRM report from any natural language prompt. The "
            "selected AI provider plans which data to fetch, runs the needed tools and "
            "writes a professional report in JSON and Markdown."
        ),
        input_schema=_object(
            {
                "prompt": _string(
                    "Natural language description of the report, e.g. \"Employee headcount "
                    "by department\" or \"Attendance analysis for last month\""
                ),
                "includeCharts": _boolean(
                    "Include data visualizations in the report (not rendered yet)", False
                ),
            },
            required=["prompt"],
        ),
    ),
    ToolDefinition(
        name="generate_quick_report",
        description=(
            "Generate predefined standard reports quickly. Available types: headcount, "
            "attendance, recruitment, performance, leaves, onboarding, payroll."
        ),
        input_schema=_object(
            {
                "reportType": _string(
                    "Type of predefined report to generate",
                    enum=[
                        "headcount",
                        "attendance",
                        "recruitment",
                        "performance",
                        "leaves",
                        "onboarding",
                        "payroll",
                    ],
                ),
                "filters": {
                    "type": "object",
                    "description": "Optional filters for the report",
                    "properties": {
                        "departmentId": _string(),
                        "startDate": _string(),
                        "endDate": _string(),
                    },
                },
            },
            required=["reportType"],
        ),
    ),
    ToolDefinition(
        name="get_database_schema",
        description=(
            "Get the HRM database schema. Compact by default (tables, primary keys, "
            "foreign key preview); set detailed=true for every column and relationship."
        ),
        input_schema=_object(
            {
                "detailed": _boolean("Return all columns and relationships", False),
            }
        ),
    ),
    ToolDefinition(
        name="execute_sql_query",
        description=(
            "Execute a single read-only SELECT query against the HRM database. Use it for "
            "JOINs and aggregations the fixed tools cannot answer. Results are capped at "
            "1000 rows and 30 seconds."
        ),
        input_schema=_object(
            {
                "query": _string("A single SELECT statement (PostgreSQL syntax)"),
            },
            required=["query"],
        ),
    ),
    ToolDefinition(
        name="get_table_info",
        description=(
            "Get columns, keys, three sample rows and the row count of one table. "
            "Call it before writing SQL against an unfamiliar table."
        ),
        input_schema=_object(
            {
                "tableName": _string("Table name, e.g. employees"),
            },
            required=["tableName"],
        ),
    ),
    ToolDefinition(
        name="explain_sql_query",
        description=(
            "Validate a SELECT query and return its execution plan without running it."
        ),
        input_schema=_object(
            {
                "query": _string("A single SELECT statement to validate"),
            },
            required=["query"],
        ),
    ),
)

_BY_NAME: dict[str, ToolDefinition] = {tool.name: tool for tool in _TOOLS}


def all_tools() -> list[ToolDefinition]:
    return list(_TOOLS)


def tool_names() -> list[str]:
    return [tool.name for tool in _TOOLS]


def get_tool(name: str) -> ToolDefinition | None:
    return _BY_NAME.get(name)


def trim_description(description: str, limit: int = DEFAULT_DESCRIPTION_LIMIT) -> str:
    text = (description or "").strip()
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def strip_schema_descriptions(schema: Any) -> Any:
    """Copy of ``schema`` without any nested ``description`` key."""
    if isinstance(schema, list):
        return [strip_schema_descriptions(item) for item in schema]
    if not isinstance(schema, dict):
        return schema
    return {
        key: strip_schema_descriptions(value)
        for key, value in schema.items()
        if key != "description"
    }


def sanitize_tool_definition(
    tool: ToolDefinition, limit: int = DEFAULT_DESCRIPTION_LIMIT
) -> dict[str, Any]:
    """Token-light rendering of ``tool`` for LLM tool lists."""
    return {
        "name": tool.name,
        "description": trim_description(tool.description, limit),
        "inputSchema": strip_schema_descriptions(tool.input_schema),
    }


def list_tools(
    compact: bool = False,
    tools: list[ToolDefinition] | None = None,
    description_limit: int = DEFAULT_DESCRIPTION_LIMIT,
) -> list[dict[str, Any]]:
    selected = all_tools() if tools is None else tools
    if compact:
        return [sanitize_tool_definition(tool, description_limit) for tool in selected]
    return [tool.to_dict() for tool in selected]
