"""LLM-planned HR reports in JSON and Markdown."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Callable

from loguru import logger

from .llm_client import ClaudeClient, GeminiClient, LLMClient
from .models import ToolCallResponse
from .tools import all_tools

REPORT_TOOLS = ("generate_dynamic_report", "generate_quick_report")
MAX_PLANNED_TOOLS = 5

QUICK_REPORT_PROMPTS = {
    "headcount": (
        "Generate a comprehensive headcount report showing employee distribution by "
        "department, designation, and location"
    ),
    "attendance": (
        "Generate an attendance report showing attendance rates, late comers, "
        "absentee patterns, and trends"
    ),
    "recruitment": (
        "Generate a recruitment report showing job openings, candidate pipeline, "
        "interview feedback status, and hiring metrics"
    ),
    "performance": (
        "Generate a performance report showing review status, goal completion, "
        "and performance trends"
    ),
    "leaves": (
        "Generate a leave report showing pending approvals, leave patterns, "
        "and leave balance analysis"
    ),
    "onboarding": (
        "Generate an onboarding report showing new hires, incomplete onboarding items, "
        "and onboarding completion rates"
    ),
    "payroll": (
        "Generate a payroll summary report showing salary structures, compensation "
        "analysis, and payroll statistics"
    ),
}

FALLBACK_PLAN = {
    "title": "HRM Report",
    "tools": [{"name": "get_hyper_insights", "arguments": {"insightType": "quick_stats"}}],
    "sections": ["Overview", "Key Metrics", "Insights"],
    "analysisType": "summary",
}

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

ToolRunner = Callable[[str, dict], ToolCallResponse]


class ReportGenerator:
    """
    Builds a report in three LLM-assisted steps.

    1. Ask the provider for a plan (title, tools with arguments, sections).
    2. Run the planned tools through ``run_tool``.
    3. Ask the provider to write the report from the collected data.

    Subclasses only choose the provider client and the footer label.
    """

    label = "AI"

    def __init__(self, client: LLMClient):
        self.client = client

    def generate_report(
        self,
        prompt: str,
        run_tool: ToolRunner,
        filters: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        plan = self._plan(prompt, filters)
        data_results, tools_used = self._collect(plan, run_tool)

        report_content = self.client.complete(self._report_prompt(plan, data_results), max_tokens=4000)
        data_points = count_data_points(data_results)
        generated_at = datetime.now(timezone.utc).isoformat()

        metadata = {
            "title": plan["title"],
            "generatedAt": generated_at,
            "prompt": prompt,
            "provider": self.client.provider,
            "analysisType": plan["analysisType"],
            "toolsUsed": tools_used,
            "dataPointCount": data_points,
        }
        json_report = {
            "metadata": metadata,
            "executiveSummary": extract_section(report_content, "Executive Summary"),
            "sections": [
                {"title": section, "content": extract_section(report_content, section)}
                for section in plan["sections"]
            ],
            "keyInsights": extract_section(report_content, "Key Insights"),
            "recommendations": extract_section(report_content, "Recommendations"),
            "rawData": data_results,
            "fullReport": report_content,
        }
        logger.info(
            f"Report '{plan['title']}' generated with {self.client.provider}: "
            f"{len(tools_used)} tools, {data_points} data points"
        )
        return {
            "json": json_report,
            "markdown": self._markdown(plan["title"], report_content, metadata),
            "metadata": {
                "title": plan["title"],
                "generatedAt": generated_at,
                "toolsUsed": tools_used,
                "dataPoints": data_points,
            },
        }

    def generate_quick_report(
        self, report_type: str, run_tool: ToolRunner, filters: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        prompt = QUICK_REPORT_PROMPTS.get(report_type, report_type)
        return self.generate_report(prompt, run_tool, filters)

    def _plan(self, prompt: str, filters: dict[str, Any] | None) -> dict[str, Any]:
        catalog = "\n".join(
            f"- {tool.name}: {tool.description}"
            for tool in all_tools()
            if tool.name not in REPORT_TOOLS
        )
        filter_note = f"\nFilters to apply where relevant: {json.dumps(filters)}" if filters else ""
        planning_prompt = (
            "You are an AI assistant that helps generate HRM reports. Analyze this report "
            "request and determine:\n"
            "1. What data needs to be fetched\n"
            "2. Which tools should be used\n"
            "3. What the report title should be\n"
            "4. What sections the report should have\n\n"
            f"Available tools:\n{catalog}\n\n"
            f'Report Request: "{prompt}"{filter_note}\n\n'
            "Respond in JSON format:\n"
            '{"title": "Report Title", "tools": [{"name": "tool_name", "arguments": {}}], '
            '"sections": ["Section 1", "Section 2"], '
            '"analysisType": "summary|detailed|trend|comparison"}'
        )
        plan_text = self.client.complete(planning_prompt, max_tokens=2000)
        return parse_plan(plan_text)

    def _collect(
        self, plan: dict[str, Any], run_tool: ToolRunner
    ) -> tuple[list[dict[str, Any]], list[str]]:
        data_results: list[dict[str, Any]] = []
        tools_used: list[str] = []
        for tool_call in plan["tools"][:MAX_PLANNED_TOOLS]:
            name = tool_call.get("name", "")
            if name in REPORT_TOOLS:
                logger.warning(f"Skipping nested report tool {name} in report plan")
                continue

            response = run_tool(name, tool_call.get("arguments") or {})
            if response.isError:
                data_results.append({"tool": name, "data": None, "error": response.first_text})
                continue
            try:
                data = json.loads(response.first_text)
            except json.JSONDecodeError:
                data = response.first_text
            data_results.append({"tool": name, "data": data})
            tools_used.append(name)
        return data_results, tools_used

    @staticmethod
    def _report_prompt(plan: dict[str, Any], data_results: list[dict[str, Any]]) -> str:
        sections = plan["sections"]
        numbered = "\n".join(f"{index}. {section}" for index, section in enumerate(sections, start=2))
        tail = len(sections) + 2
        return (
            "Generate a comprehensive HRM report based on this data:\n\n"
            f"Title: {plan['title']}\n"
            f"Analysis Type: {plan['analysisType']}\n"
            f"Sections Required: {', '.join(sections)}\n\n"
            f"Data Collected:\n{json.dumps(data_results, indent=2, default=str)}\n\n"
            "Create a detailed, professional report with:\n"
            f"1. Executive Summary\n{numbered}\n"
            f"{tail}. Key Insights and Recommendations\n"
            f"{tail + 1}. Conclusion\n\n"
            "Use Markdown headings (##) for each section, bullet points, and include "
            "specific numbers, percentages, and trends from the data."
        )

    def _markdown(self, title: str, content: str, metadata: dict[str, Any]) -> str:
        return (
            f"# {title}\n\n---\n\n"
            f"**Generated:** {metadata['generatedAt']}\n"
            f"**Tools Used:** {', '.join(metadata['toolsUsed']) or 'none'}\n"
            f"**Data Points:** {metadata['dataPointCount']}\n\n---\n\n"
            f"{content}\n\n---\n\n"
            f"*Report generated by HRM MCP Server with {self.label}*\n"
        )


class ClaudeReportGenerator(ReportGenerator):
    label = "Claude AI"

    def __init__(self, client: ClaudeClient):
        super().__init__(client)


class GeminiReportGenerator(ReportGenerator):
    label = "Google Gemini"

    def __init__(self, client: GeminiClient):
        super().__init__(client)


def parse_plan(plan_text: str) -> dict[str, Any]:
    """Plan JSON from a model answer, or ``FALLBACK_PLAN`` when it cannot be used."""
    match = _JSON_OBJECT.search(plan_text or "")
    try:
        plan = json.loads(match.group(0) if match else plan_text)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Report plan was not valid JSON, using fallback plan")
        return dict(FALLBACK_PLAN)

    if not isinstance(plan, dict) or not isinstance(plan.get("tools"), list):
        logger.warning("Report plan had no tool list, using fallback plan")
        return dict(FALLBACK_PLAN)

    sections = plan.get("sections")
    return {
        "title": str(plan.get("title") or FALLBACK_PLAN["title"]),
        "tools": [tool for tool in plan["tools"] if isinstance(tool, dict)],
        "sections": [str(s) for s in sections] if isinstance(sections, list) and sections else list(FALLBACK_PLAN["sections"]),
        "analysisType": str(plan.get("analysisType") or "summary"),
    }


def count_data_points(data_results: list[dict[str, Any]]) -> int:
    total = 0
    for result in data_results:
        data = result.get("data")
        if not data:
            continue
        if isinstance(data, list):
            total += len(data)
        elif isinstance(data, dict) and isinstance(data.get("count"), int) and data["count"]:
            total += data["count"]
        else:
            total += 1
    return total


def extract_section(content: str, section_name: str) -> str:
    """Lines under the heading that mentions ``section_name``, up to the next heading."""
    wanted = section_name.lower()
    collected: list[str] = []
    in_section = False
    for line in (content or "").split("\n"):
        stripped = line.strip()
        is_heading = stripped.startswith("#")
        if wanted in stripped.lower() and (is_heading or stripped.endswith(":")):
            in_section = True
            continue
        if in_section and is_heading:
            break
        if in_section and stripped:
            collected.append(line)
    return "\n".join(collected).strip() or "No data available for this section."
