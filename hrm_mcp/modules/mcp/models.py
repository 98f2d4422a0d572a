"""Pydantic models for tool calls and the caller context."""

from __future__ import annotations

import json as jsonlib
from dataclasses import dataclass, field
from typing import Any, Literal

from fastapi import Request
from pydantic import BaseModel, Field


class ContentItem(BaseModel):
    """One content block of a tool response (MCP content shape)."""

    type: Literal["text", "image", "resource"] = "text"
    text: str | None = None
    data: str | None = None
    mimeType: str | None = None


class ToolCallResponse(BaseModel):
    """Uniform envelope returned for every tool call."""

    content: list[ContentItem] = Field(default_factory=list)
    isError: bool = False

    @classmethod
    def text(cls, text: str) -> "ToolCallResponse":
        return cls(content=[ContentItem(type="text", text=text)])

    @classmethod
    def json(cls, payload: Any) -> "ToolCallResponse":
        return cls.text(jsonlib.dumps(payload, indent=2, default=str, ensure_ascii=False))

    @classmethod
    def error(cls, message: str) -> "ToolCallResponse":
        return cls(content=[ContentItem(type="text", text=message)], isError=True)

    @property
    def first_text(self) -> str:
        for item in self.content:
            if item.type == "text" and item.text is not None:
                return item.text
        return ""


class ToolCallRequest(BaseModel):
    """Request body for a direct tool call."""

    name: str = Field(..., min_length=1, description="Tool name from the catalog")
    arguments: dict[str, Any] = Field(default_factory=dict)
    provider: str | None = Field(
        default=None, description="AI provider used by report tools (claude or gemini)"
    )


class ToolSelectRequest(BaseModel):
    """Request body for catalog narrowing."""

    query: str = Field(..., min_length=1, description="User message to match against")


class ToolCallEnvelope(BaseModel):
    status: Literal["success", "error"]
    data: ToolCallResponse


@dataclass(frozen=True)
class CallerContext:
    """
    Who is calling a tool.

    Authentication happens upstream; the HTTP surface only copies the
    identity headers the gateway forwards.
    """

    source: Literal["http", "stdio", "cli"]
    principal: str = "anonymous"
    roles: tuple[str, ...] = field(default_factory=tuple)
    request: Request | None = None

    @classmethod
    def from_request(cls, request: Request) -> "CallerContext":
        roles = request.headers.get("x-user-roles", "")
        return cls(
            source="http",
            principal=request.headers.get("x-user-id", "anonymous"),
            roles=tuple(role.strip() for role in roles.split(",") if role.strip()),
            request=request,
        )

    @classmethod
    def stdio(cls) -> "CallerContext":
        return cls(source="stdio", principal="mcp-stdio", roles=("system",))

    @classmethod
    def cli(cls) -> "CallerContext":
        return cls(source="cli", principal="cli", roles=("system",))
