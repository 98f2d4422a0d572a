"""MCP tool endpoints for the HRM frontend and AI chat backends."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from loguru import logger
from pydantic import BaseModel, Field

from ..modules.mcp.config import SUPPORTED_AI_PROVIDERS, settings
from ..modules.mcp.dispatcher import ToolDispatcher
from ..modules.mcp.errors import HRMToolError
from ..modules.mcp.executor import BoundedExecutor
from ..modules.mcp.formatter import MAX_PREVIEW_ROWS
from ..modules.mcp.models import (
    CallerContext,
    ToolCallEnvelope,
    ToolCallRequest,
    ToolSelectRequest,
)
from ..modules.mcp.prompts import PROMPTS, UnknownPrompt, render_prompt
from ..modules.mcp.selector import select_relevant_tools, tool_selection_stats
from ..modules.mcp.tools import all_tools, list_tools

router = APIRouter(prefix="/api/mcp", tags=["mcp"])

# Global instance (initialized at startup)
dispatcher: ToolDispatcher | None = None


def get_dispatcher() -> ToolDispatcher:
    """Dependency to get the tool dispatcher instance."""
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Tool dispatcher not initialized")
    return dispatcher


class PromptRequest(BaseModel):
    name: str = Field(..., min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)


@router.get("/status")
async def status() -> dict[str, Any]:
    """Public liveness probe for MCP clients."""
    return {
        "status": "success",
        "data": {
            "serverStatus": "online" if dispatcher is not None else "starting",
            "availableTools": len(all_tools()),
            "defaultProvider": settings.default_ai_provider,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }


@router.get("/capabilities")
async def capabilities() -> dict[str, Any]:
    return {
        "status": "success",
        "data": {
            "serverInfo": {
                "name": "HRM MCP Server",
                "version": "1.0.0",
                "description": "Model Context Protocol server for HRM system integration",
            },
            "capabilities": {
                "tools": {"available": True, "count": len(all_tools())},
                "resources": {"available": False, "count": 0},
                "prompts": {"available": True, "count": len(PROMPTS)},
            },
            "providers": list(SUPPORTED_AI_PROVIDERS),
            "limits": {
                "maxResultRows": BoundedExecutor.MAX_RESULT_LIMIT,
                "previewRows": MAX_PREVIEW_ROWS,
                "queryTimeoutSeconds": BoundedExecutor.QUERY_TIMEOUT_SECONDS,
            },
            "protocolVersion": "2024-11-05",
        },
    }


@router.get("/tools")
async def get_tools(compact: bool = Query(default=False)) -> dict[str, Any]:
    """List the tool catalog; ``compact`` trims descriptions and nested schema docs."""
    tools = list_tools(compact=compact, description_limit=settings.tool_description_limit)
    return {"status": "success", "data": {"tools": tools, "count": len(tools)}}


@router.post("/tools/select")
async def select_tools(request: ToolSelectRequest) -> dict[str, Any]:
    """
    Tools relevant to a chat message.

    When selection is disabled the full catalog is returned.
    """
    if settings.tool_selection_enabled:
        selected = select_relevant_tools(request.query)
    else:
        selected = all_tools()

    return {
        "status": "success",
        "data": {
            "tools": list_tools(
                compact=True, tools=selected, description_limit=settings.tool_description_limit
            ),
            "stats": tool_selection_stats(request.query),
        },
    }


@router.post(
    "/tools/call", response_model=ToolCallEnvelope, response_model_exclude_none=True
)
def call_tool(request: ToolCallRequest, http_request: Request) -> ToolCallEnvelope:
    """
    Execute one tool.

    Tool failures are returned with HTTP 200 and ``status="error"``; the
    envelope carries ``isError`` and the readable message.
    """
    tool_dispatcher = get_dispatcher()
    context = CallerContext.from_request(http_request)
    response = tool_dispatcher.execute(
        request.name, request.arguments, context, provider=request.provider
    )
    return ToolCallEnvelope(status="error" if response.isError else "success", data=response)


@router.get("/schema")
def get_schema(detailed: bool = Query(default=False)) -> dict[str, Any]:
    tool_dispatcher = get_dispatcher()
    try:
        if detailed:
            schema = tool_dispatcher.introspector.full_schema()
        else:
            schema = tool_dispatcher.introspector.compact_schema()
    except HRMToolError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Schema introspection failed")
        raise HTTPException(status_code=500, detail="Schema introspection failed") from exc
    return {"status": "success", "data": schema}


@router.get("/prompts")
async def get_prompts() -> dict[str, Any]:
    return {"status": "success", "data": {"prompts": PROMPTS}}


@router.post("/prompts/get")
async def get_prompt(request: PromptRequest) -> dict[str, Any]:
    try:
        text = render_prompt(request.name, request.arguments)
    except UnknownPrompt as exc:
        raise HTTPException(status_code=404, detail=f"Unknown prompt: {request.name}") from exc
    return {
        "status": "success",
        "data": {"messages": [{"role": "user", "content": {"type": "text", "text": text}}]},
    }
