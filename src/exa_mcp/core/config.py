"""Configuration loader for the Exa MCP server."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from exa_mcp.core.constants import EXA_API_KEY_ENV

if TYPE_CHECKING:
    from pathlib import Path

TOOL_LIST_SEPARATOR = ","


def normalize_tool_list(value: object) -> tuple[str, ...]:
    """Normalize a comma-delimited string or a sequence into trimmed, non-empty ids.

    ``None``, ``""``, ``" , ,"`` and ``[]`` all normalize to ``()``.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        items: Sequence[object] = value.split(TOOL_LIST_SEPARATOR)
    elif isinstance(value, Sequence):
        items = value
    else:
        raise ValueError("expected a comma-separated string or a list of strings")

    normalized: list[str] = []
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"tool ids must be strings, got {type(item).__name__}")
        stripped = item.strip()
        if stripped:
            normalized.append(stripped)
    return tuple(normalized)


class ExaMCPConfig(BaseModel):
    """Run-time configuration for one server instance.

    Accepts the camelCase keys used by hosted MCP configuration as well as the
    snake_case field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    exa_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("exa_api_key", "exaApiKey", "apiKey", "api_key"),
        description="Exa AI API key for search operations",
    )
    enabled_tools: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("enabled_tools", "enabledTools"),
        description="Tools to enable (comma-separated string or list)",
    )
    tools: tuple[str, ...] = Field(
        default=(),
        description="Alias for enabled_tools; takes precedence when non-empty",
    )
    debug: bool = Field(default=False, description="Enable debug logging")

    @field_validator("enabled_tools", "tools", mode="before")
    @classmethod
    def _normalize_tools(cls, value: object) -> tuple[str, ...]:
        return normalize_tool_list(value)

    @property
    def enabled_capabilities(self) -> tuple[str, ...]:
        """Requested capability ids, or ``()`` meaning "use defaults"."""
        return self.tools or self.enabled_tools

    @property
    def api_key(self) -> str:
        if self.exa_api_key:
            return self.exa_api_key
        return os.environ.get(EXA_API_KEY_ENV, "")

    @classmethod
    def load(cls, path: Path | None = None, **overrides: Any) -> ExaMCPConfig:
        """Load config from an optional TOML file, then apply non-``None`` overrides.

        The file may hold keys at top level or under an ``[exa]`` table.
        """
        data: dict[str, Any] = {}
        if path is not None:
            with path.open("rb") as handle:
                raw = tomllib.load(handle)
            section = raw.get("exa")
            data.update(section if isinstance(section, dict) else raw)
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(data)


__all__ = ["ExaMCPConfig", "normalize_tool_list"]
