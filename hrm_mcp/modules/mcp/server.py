"""stdio MCP host over the shared tool dispatcher."""

from __future__ import annotations

import asyncio
from typing import Any

import mcp.types as types
from loguru import logger
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .dispatcher import ToolDispatcher
from .models import CallerContext
from .prompts import PROMPTS, UnknownPrompt, render_prompt
from .tools import all_tools

SERVER_NAME = "hrm-mcp"
SERVER_INSTRUCTIONS = (
    "MCP provider for the HRM platform. Exposes employee, attendance, leave, "
    "recruitment and performance tools plus read-only SQL over the HRM database."
)


class ToolCallFailed(Exception):
    """Raised inside ``call_tool`` so the SDK returns ``isError`` with this text."""


def create_server(dispatcher: ToolDispatcher) -> Server:
    """
    Build the low-level MCP server.

    Tools come from the static catalog and every call goes through
    ``dispatcher`` with a stdio caller context, so the stdio host and the
    HTTP surface return the same envelopes.
    """
    server = Server(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    context = CallerContext.stdio()

    @server.list_tools()
    async def _list_tools() -> list[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in all_tools()
        ]

    @server.call_tool()
    async def _call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        response = await asyncio.to_thread(dispatcher.execute, name, arguments or {}, context)
        if response.isError:
            raise ToolCallFailed(response.first_text)
        return [
            types.TextContent(type="text", text=item.text or "")
            for item in response.content
            if item.type == "text"
        ]

    @server.list_prompts()
    async def _list_prompts() -> list[types.Prompt]:
        return [
            types.Prompt(
                name=prompt["name"],
                description=prompt["description"],
                arguments=[types.PromptArgument(**argument) for argument in prompt["arguments"]],
            )
            for prompt in PROMPTS
        ]

    @server.get_prompt()
    async def _get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
        try:
            text = render_prompt(name, arguments)
        except UnknownPrompt as exc:
            raise ValueError(f"Unknown prompt: {name}") from exc
        return types.GetPromptResult(
            messages=[
                types.PromptMessage(role="user", content=types.TextContent(type="text", text=text))
            ]
        )

    return server


async def serve_stdio(dispatcher: ToolDispatcher) -> None:
    server = create_server(dispatcher)
    logger.info(f"Starting {SERVER_NAME} on stdio with {len(all_tools())} tools")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
