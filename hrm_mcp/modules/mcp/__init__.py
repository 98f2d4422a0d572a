"""MCP tool module: guarded SQL, tool catalog and dispatch."""

from .dispatcher import ToolDispatcher
from .errors import (
    HandlerFailure,
    HRMToolError,
    InvalidQuery,
    InvalidToolArguments,
    QueryTimeout,
    TableNotFound,
    UnknownTool,
)
from .executor import BoundedExecutor
from .introspector import SchemaIntrospector
from .models import CallerContext, ToolCallRequest, ToolCallResponse
from .store import SqlStore

__all__ = [
    "ToolDispatcher",
    "BoundedExecutor",
    "SchemaIntrospector",
    "SqlStore",
    "CallerContext",
    "ToolCallRequest",
    "ToolCallResponse",
    "HRMToolError",
    "InvalidQuery",
    "QueryTimeout",
    "UnknownTool",
    "InvalidToolArguments",
    "HandlerFailure",
    "TableNotFound",
]
