"""Exceptions raised by the guarded SQL pipeline and tool handlers.

None of these cross the dispatcher boundary: ``ToolDispatcher.execute``
turns every one of them into an error envelope.
"""


class HRMToolError(Exception):
    """Base exception for tool-layer errors."""

    pass


class InvalidQuery(HRMToolError):
    """SQL input rejected before execution (not a single read-only SELECT)."""


class QueryTimeout(HRMToolError):
    """The database cancelled the statement after the execution timeout."""

    def __init__(self, timeout_seconds: float, elapsed_ms: int | None = None):
        self.timeout_seconds = timeout_seconds
        self.elapsed_ms = elapsed_ms
        message = f"Query timeout ({timeout_seconds:g}s)"
        if elapsed_ms is not None:
            message += f" after {elapsed_ms} ms. Narrow the query and try again."
        super().__init__(message)


class UnknownTool(HRMToolError):
    """Tool name outside the static catalog."""

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class InvalidToolArguments(HRMToolError):
    """Arguments did not match the tool's input schema."""


class HandlerFailure(HRMToolError):
    """Downstream store or handler error surfaced through the dispatcher."""


class TableNotFound(HandlerFailure):
    """Requested table does not exist in the inspected schema."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(
            f"Table '{table_name}' does not exist. "
            "Use get_database_schema to list available tables."
        )
