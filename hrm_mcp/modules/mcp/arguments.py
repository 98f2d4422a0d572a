"""Argument models for each tool, validated before a handler runs."""

from __future__ import annotations

import datetime as dt
from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import InvalidToolArguments

MAX_LIST_LIMIT = 100


class ToolArguments(BaseModel):
    """Tool inputs use camelCase on the wire and snake_case in handlers."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class EmployeeInfoArgs(ToolArguments):
    identifier: str = Field(..., min_length=1)
    include_attendance: bool = Field(default=False, alias="includeAttendance")


class DepartmentEmployeesArgs(ToolArguments):
    department_id: str = Field(..., min_length=1, alias="departmentId")
    include_inactive: bool = Field(default=False, alias="includeInactive")


class EmployeeSearchFilters(ToolArguments):
    department_id: str | None = Field(default=None, alias="departmentId")
    designation_id: str | None = Field(default=None, alias="designationId")
    location_id: str | None = Field(default=None, alias="locationId")


class SearchEmployeesArgs(ToolArguments):
    query: str = Field(..., min_length=1)
    filters: EmployeeSearchFilters = Field(default_factory=EmployeeSearchFilters)
    limit: int = Field(default=10, ge=1, le=MAX_LIST_LIMIT)


class DateRangeArgs(ToolArguments):
    @model_validator(mode="after")
    def _check_range(self):
        start = getattr(self, "start_date", None)
        end = getattr(self, "end_date", None)
        if start and end and end < start:
            raise ValueError("endDate must not be before startDate")
        return self


class AttendanceSummaryArgs(DateRangeArgs):
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    employee_id: str | None = Field(default=None, alias="employeeId")
    department_id: str | None = Field(default=None, alias="departmentId")


class LeaveRequestsArgs(DateRangeArgs):
    status: Literal["pending", "approved", "rejected", "cancelled"] | None = None
    employee_id: str | None = Field(default=None, alias="employeeId")
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")
    limit: int = Field(default=20, ge=1, le=MAX_LIST_LIMIT)


class JobOpeningsArgs(ToolArguments):
    department_id: str | None = Field(default=None, alias="departmentId")
    status: Literal["open", "closed", "on_hold"] | None = None
    include_applications: bool = Field(default=False, alias="includeApplications")


class CandidatesArgs(ToolArguments):
    job_opening_id: str | None = Field(default=None, alias="jobOpeningId")
    status: str | None = None
    skills: list[str] = Field(default_factory=list)
    limit: int = Field(default=20, ge=1, le=MAX_LIST_LIMIT)


class PerformanceReviewsArgs(ToolArguments):
    employee_id: str | None = Field(default=None, alias="employeeId")
    review_period: str | None = Field(default=None, alias="reviewPeriod")
    status: Literal["draft", "submitted", "completed"] | None = None


class InsightFilters(ToolArguments):
    department_id: str | None = Field(default=None, alias="departmentId")
    days: int | None = Field(default=None, ge=1, le=365)
    on_date: dt.date | None = Field(default=None, alias="date")
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")


InsightType = Literal[
    "missing_documents",
    "incomplete_onboarding",
    "attendance_summary",
    "absentee_patterns",
    "recruitment_pipeline",
    "pending_feedback",
    "quick_stats",
]


class HyperInsightsArgs(ToolArguments):
    insight_type: InsightType = Field(..., alias="insightType")
    filters: InsightFilters = Field(default_factory=InsightFilters)


class DepartmentsArgs(ToolArguments):
    include_employee_count: bool = Field(default=True, alias="includeEmployeeCount")


class CreateLeaveRequestArgs(DateRangeArgs):
    employee_id: str = Field(..., min_length=1, alias="employeeId")
    leave_type_id: str = Field(..., min_length=1, alias="leaveTypeId")
    start_date: date = Field(..., alias="startDate")
    end_date: date = Field(..., alias="endDate")
    reason: str = Field(..., min_length=1)


class EmployeeGoalsArgs(ToolArguments):
    employee_id: str = Field(..., min_length=1, alias="employeeId")
    status: Literal["active", "completed", "overdue"] | None = None


class DynamicReportArgs(ToolArguments):
    prompt: str = Field(..., min_length=3)
    include_charts: bool = Field(default=False, alias="includeCharts")


ReportType = Literal[
    "headcount", "attendance", "recruitment", "performance", "leaves", "onboarding", "payroll"
]


class ReportFilters(ToolArguments):
    department_id: str | None = Field(default=None, alias="departmentId")
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")


class QuickReportArgs(ToolArguments):
    report_type: ReportType = Field(..., alias="reportType")
    filters: ReportFilters = Field(default_factory=ReportFilters)


class DatabaseSchemaArgs(ToolArguments):
    detailed: bool = False


class SqlQueryArgs(ToolArguments):
    # Content checks belong to the sanitizer so its messages reach the caller
    query: Any = None


class TableInfoArgs(ToolArguments):
    table_name: str = Field(..., min_length=1, alias="tableName")

    @field_validator("table_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip().strip('"')


ARGUMENT_MODELS: dict[str, type[ToolArguments]] = {
    "get_employee_info": EmployeeInfoArgs,
    "get_department_employees": DepartmentEmployeesArgs,
    "search_employees": SearchEmployeesArgs,
    "get_attendance_summary": AttendanceSummaryArgs,
    "get_leave_requests": LeaveRequestsArgs,
    "get_job_openings": JobOpeningsArgs,
    "get_candidates": CandidatesArgs,
    "get_performance_reviews": PerformanceReviewsArgs,
    "get_hyper_insights": HyperInsightsArgs,
    "get_departments": DepartmentsArgs,
    "create_leave_request": CreateLeaveRequestArgs,
    "get_employee_goals": EmployeeGoalsArgs,
    "generate_dynamic_report": DynamicReportArgs,
    "generate_quick_report": QuickReportArgs,
    "get_database_schema": DatabaseSchemaArgs,
    "execute_sql_query": SqlQueryArgs,
    "get_table_info": TableInfoArgs,
    "explain_sql_query": SqlQueryArgs,
}


def parse_arguments(tool_name: str, arguments: dict[str, Any] | None) -> ToolArguments:
    """
    Validate ``arguments`` against the model registered for ``tool_name``.

    Raises:
        InvalidToolArguments: the payload does not match the model.
    """
    model = ARGUMENT_MODELS[tool_name]
    try:
        return model.model_validate(arguments or {})
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidToolArguments(f"Invalid arguments for tool {tool_name}: {problems}") from exc
