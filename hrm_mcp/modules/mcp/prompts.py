"""Predefined MCP prompts for common HR analyses."""

from __future__ import annotations

from typing import Any

PROMPTS: list[dict[str, Any]] = [
    {
        "name": "employee_onboarding_check",
        "description": "Check onboarding status and identify any incomplete items",
        "arguments": [
            {"name": "days", "description": "Number of days since joining to check", "required": False},
        ],
    },
    {
        "name": "attendance_analysis",
        "description": "Analyze attendance patterns and identify issues",
        "arguments": [
            {"name": "departmentId", "description": "Specific department to analyze", "required": False},
            {"name": "days", "description": "Number of days to analyze", "required": False},
        ],
    },
    {
        "name": "recruitment_pipeline_review",
        "description": "Review recruitment pipeline and provide insights",
        "arguments": [
            {"name": "jobOpeningId", "description": "Specific job opening to review", "required": False},
        ],
    },
]


class UnknownPrompt(KeyError):
    pass


def render_prompt(name: str, arguments: dict[str, Any] | None = None) -> str:
    """
    Text of the user message for prompt ``name``.

    Raises:
        UnknownPrompt: ``name`` is not one of ``PROMPTS``.
    """
    args = arguments or {}
    days = args.get("days") or 30

    if name == "employee_onboarding_check":
        return (
            f"Please check the onboarding status of employees who joined in the last {days} "
            "days. Identify anyone with incomplete onboarding and list what items are pending."
        )
    if name == "attendance_analysis":
        scope = "the specified department" if args.get("departmentId") else "the company"
        return (
            f"Analyze attendance patterns for {scope} over the last {days} days. Identify any "
            "concerning patterns like frequent absences, late arrivals, or anomalies."
        )
    if name == "recruitment_pipeline_review":
        scope = " for the specified job opening" if args.get("jobOpeningId") else ""
        return (
            f"Review the recruitment pipeline{scope}. Provide insights on candidate flow, "
            "bottlenecks, pending feedback, and recommendations."
        )
    raise UnknownPrompt(name)
