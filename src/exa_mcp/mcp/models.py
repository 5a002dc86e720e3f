"""Response envelope helpers and pydantic models for MCP surfaces.

Every capability handler answers with a ``CallToolResult``: an ordered list
of content blocks plus an ``isError`` flag.
"""

from __future__ import annotations

from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel, Field


def text_result(text: str) -> CallToolResult:
    """Successful envelope carrying one text block."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=False)


def error_result(text: str) -> CallToolResult:
    """Error envelope carrying one human-readable text block."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=True)


def result_text(result: CallToolResult) -> str:
    """Concatenate the text blocks of an envelope."""
    return "\n".join(block.text for block in result.content if isinstance(block, TextContent))


class CapabilityInfo(BaseModel):
    """One entry of the exa://tools/list resource."""

    id: str = Field(description="Stable capability identifier")
    name: str = Field(description="Human-readable capability name")
    description: str = Field(description="What the capability does")
    enabled: bool = Field(description="Whether the capability is active on this server")


class ResearchStartResponse(BaseModel):
    """Body returned by deep_researcher_start."""

    success: bool = Field(default=True, description="Whether the task was accepted")
    taskId: str = Field(description="Opaque research task identifier")  # noqa: N815
    model: str = Field(description="Research model variant")
    instructions: str = Field(description="Research instructions as submitted")
    outputSchema: dict[str, object] | None = Field(  # noqa: N815
        default=None, description="Inferred output schema when requested"
    )
    message: str = Field(description="Human-readable status message")
    nextStep: str = Field(description="Suggested follow-up call")  # noqa: N815


__all__ = [
    "CapabilityInfo",
    "ResearchStartResponse",
    "error_result",
    "result_text",
    "text_result",
]
