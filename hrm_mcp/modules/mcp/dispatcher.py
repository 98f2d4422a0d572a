"""Single entry point that maps a tool call to its handler."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from .arguments import ToolArguments, parse_arguments
from .config import SUPPORTED_AI_PROVIDERS
from .errors import HRMToolError, InvalidToolArguments, UnknownTool
from .executor import BoundedExecutor, QueryResult
from .handlers import HRMHandlers
from .insights import HyperInsights
from .introspector import SchemaIntrospector
from .models import CallerContext, ToolCallResponse
from .reports import ReportGenerator
from .tools import get_tool

Handler = Callable[[Any, CallerContext, str], ToolCallResponse]


def render_query_result(result: QueryResult) -> str:
    """Summary, markdown preview and execution metadata as one text block."""
    formatted = result.formatted
    return (
        f"{formatted.summary}\n\n"
        f"{formatted.markdown_table}\n\n"
        f"---\n"
        f"Rows returned: {result.row_count} | "
        f"Preview rows: {formatted.preview_row_count} | "
        f"Execution time: {result.execution_time_ms} ms\n"
        f"Executed query: {result.executed_sql}"
    )


class ToolDispatcher:
    """
    Routes tool calls from HTTP, stdio and CLI callers.

    ``execute`` never raises: unknown tools, invalid arguments and handler
    failures all come back as an error envelope with a readable message.
    The dispatcher holds no per-call state and can be shared across threads.
    """

    def __init__(
        self,
        executor: BoundedExecutor,
        introspector: SchemaIntrospector,
        handlers: HRMHandlers,
        insights: HyperInsights,
        report_generators: dict[str, ReportGenerator],
        default_provider: str = "claude",
    ):
        self.executor = executor
        self.introspector = introspector
        self.handlers = handlers
        self.insights = insights
        self.report_generators = report_generators
        self.default_provider = default_provider
        self._registry: dict[str, Handler] = {
            "get_employee_info": self._entity(handlers.get_employee_info),
            "get_department_employees": self._entity(handlers.get_department_employees),
            "search_employees": self._entity(handlers.search_employees),
            "get_attendance_summary": self._entity(handlers.get_attendance_summary),
            "get_leave_requests": self._entity(handlers.get_leave_requests),
            "get_job_openings": self._entity(handlers.get_job_openings),
            "get_candidates": self._entity(handlers.get_candidates),
            "get_performance_reviews": self._entity(handlers.get_performance_reviews),
            "get_departments": self._entity(handlers.get_departments),
            "get_employee_goals": self._entity(handlers.get_employee_goals),
            "get_hyper_insights": self._hyper_insights,
            "create_leave_request": self._create_leave_request,
            "generate_dynamic_report": self._dynamic_report,
            "generate_quick_report": self._quick_report,
            "get_database_schema": self._database_schema,
            "execute_sql_query": self._execute_sql,
            "get_table_info": self._table_info,
            "explain_sql_query": self._explain_sql,
        }

    def execute(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        context: CallerContext,
        provider: str | None = None,
    ) -> ToolCallResponse:
        provider_name = self.resolve_provider(provider)
        logger.info(
            f"Tool call: {name} from {context.source}:{context.principal} "
            f"with args {sorted(arguments) if isinstance(arguments, dict) else []}"
        )

        try:
            handler = self._registry.get(name)
            if handler is None or get_tool(name) is None:
                raise UnknownTool(name)
            if arguments is not None and not isinstance(arguments, dict):
                raise InvalidToolArguments(
                    f"Invalid arguments for tool {name}: arguments must be an object"
                )
            parsed = parse_arguments(name, arguments)
            return handler(parsed, context, provider_name)
        except (UnknownTool, InvalidToolArguments) as exc:
            logger.warning(str(exc))
            return ToolCallResponse.error(str(exc))
        except HRMToolError as exc:
            logger.warning(f"Tool {name} failed: {exc}")
            return ToolCallResponse.error(f"Error executing tool {name}: {exc}")
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"Unexpected error in tool {name}")
            return ToolCallResponse.error(f"Error executing tool {name}: {exc}")

    def resolve_provider(self, provider: str | None) -> str:
        if provider is None:
            return self.default_provider
        normalized = provider.lower()
        if normalized not in SUPPORTED_AI_PROVIDERS:
            logger.warning(f"Unsupported AI provider '{provider}', using {self.default_provider}")
            return self.default_provider
        return normalized

    @staticmethod
    def _entity(method: Callable[[Any], dict[str, Any]]) -> Handler:
        def handler(args: ToolArguments, context: CallerContext, provider: str) -> ToolCallResponse:
            return ToolCallResponse.json(method(args))

        return handler

    def _hyper_insights(self, args, context, provider) -> ToolCallResponse:
        return ToolCallResponse.json(self.insights.get(args.insight_type, args.filters))

    def _create_leave_request(self, args, context, provider) -> ToolCallResponse:
        return ToolCallResponse.json(self.handlers.create_leave_request(args, context.principal))

    def _report_runner(self, context: CallerContext, provider: str):
        def run_tool(name: str, arguments: dict) -> ToolCallResponse:
            return self.execute(name, arguments, context, provider)

        return run_tool

    def _generator(self, provider: str) -> ReportGenerator:
        generator = self.report_generators.get(provider)
        if generator is None:
            raise HRMToolError(f"No report generator configured for provider {provider}")
        return generator

    def _dynamic_report(self, args, context, provider) -> ToolCallResponse:
        report = self._generator(provider).generate_report(
            args.prompt, self._report_runner(context, provider)
        )
        return ToolCallResponse.json(
            {
                "success": True,
                "message": f"Report generated successfully: {report['metadata']['title']}",
                "metadata": report["metadata"],
                "formats": {"json": report["json"], "markdown": report["markdown"]},
            }
        )

    def _quick_report(self, args, context, provider) -> ToolCallResponse:
        filters = args.filters.model_dump(by_alias=True, exclude_none=True, mode="json")
        report = self._generator(provider).generate_quick_report(
            args.report_type, self._report_runner(context, provider), filters or None
        )
        return ToolCallResponse.json(
            {
                "success": True,
                "message": f"{args.report_type} report generated successfully",
                "reportType": args.report_type,
                "metadata": report["metadata"],
                "formats": {"json": report["json"], "markdown": report["markdown"]},
            }
        )

    def _database_schema(self, args, context, provider) -> ToolCallResponse:
        if args.detailed:
            return ToolCallResponse.json(self.introspector.full_schema())
        schema = self.introspector.compact_schema()
        schema["queryExamples"] = self.executor.query_examples()
        return ToolCallResponse.json(schema)

    def _execute_sql(self, args, context, provider) -> ToolCallResponse:
        result = self.executor.run(args.query)
        return ToolCallResponse.text(render_query_result(result))

    def _table_info(self, args, context, provider) -> ToolCallResponse:
        return ToolCallResponse.json(self.introspector.table_info(args.table_name))

    def _explain_sql(self, args, context, provider) -> ToolCallResponse:
        return ToolCallResponse.json(self.executor.explain(args.query))
