"""Logging setup and per-invocation request loggers.

The stdio transport owns stdout, so every record goes to stderr.
"""

from __future__ import annotations

import logging
import secrets
import sys
import time
from dataclasses import dataclass, field

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_REQUEST_LOGGER_NAME = "exa_mcp.requests"


def configure_logging(debug: bool = False) -> None:
    """Route package logs to stderr at DEBUG (debug mode) or INFO."""
    root = logging.getLogger("exa_mcp")
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if not any(getattr(handler, "_exa_mcp", False) for handler in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._exa_mcp = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.propagate = False


def new_request_id(tool_name: str) -> str:
    return f"{tool_name}-{int(time.time() * 1000)}-{secrets.token_hex(3)[:5]}"


@dataclass(slots=True)
class RequestLogger:
    """Structured start/progress/complete/error records for one tool call."""

    tool_name: str
    request_id: str = ""
    _logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(_REQUEST_LOGGER_NAME), repr=False
    )

    def __post_init__(self) -> None:
        if not self.request_id:
            self.request_id = new_request_id(self.tool_name)

    def _prefix(self) -> str:
        return f"[{self.request_id}] [{self.tool_name}]"

    def start(self, query: str) -> None:
        self._logger.info("%s Starting: %s", self._prefix(), query)

    def log(self, message: str) -> None:
        self._logger.info("%s %s", self._prefix(), message)

    def complete(self) -> None:
        self._logger.info("%s Completed successfully", self._prefix())

    def error(self, exc: BaseException) -> None:
        self._logger.error("%s Error: %s", self._prefix(), exc)


__all__ = ["RequestLogger", "configure_logging", "new_request_id"]
