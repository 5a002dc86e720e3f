"""Failure taxonomy for calls against the Exa API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

ERROR_UNREACHABLE: Final[str] = "UNREACHABLE"
ERROR_REMOTE_REJECTED: Final[str] = "REMOTE_REJECTED"
ERROR_MALFORMED_SNAPSHOT: Final[str] = "MALFORMED_SNAPSHOT"


@dataclass(slots=True, eq=False)
class ExaError(Exception):
    """Classified Exa API failure with an optional remote status code.

    ``UNREACHABLE`` means no response arrived (timeout, DNS, connection reset),
    ``REMOTE_REJECTED`` means the endpoint answered with a non-success status,
    and ``MALFORMED_SNAPSHOT`` means a successful response lacked the fields
    needed to interpret it.
    """

    code: str
    message: str
    status_code: int | None = None
    hint: str | None = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"[{self.code}] ({self.status_code}) {self.message}"
        return f"[{self.code}] {self.message}"

    @classmethod
    def unreachable(cls, message: str) -> ExaError:
        return cls(
            code=ERROR_UNREACHABLE,
            message=message,
            hint="Check your network connection and try again.",
        )

    @classmethod
    def remote_rejected(cls, status_code: int, message: str) -> ExaError:
        return cls(
            code=ERROR_REMOTE_REJECTED,
            message=message,
            status_code=status_code,
            hint=_rejection_hint(status_code),
        )

    @classmethod
    def malformed_snapshot(cls, message: str) -> ExaError:
        return cls(
            code=ERROR_MALFORMED_SNAPSHOT,
            message=message,
            hint="The Exa API returned an unexpected payload. Retry later.",
        )


def _rejection_hint(status_code: int) -> str:
    if status_code in (401, 403):
        return "Verify that a valid Exa API key is configured."
    if status_code == 404:
        return "Verify the identifier you passed and try again."
    if status_code == 429:
        return "Rate limit reached. Wait before retrying."
    if status_code >= 500:
        return "The Exa API is having trouble. Retry later."
    return "Check your query and try again."


__all__ = [
    "ERROR_MALFORMED_SNAPSHOT",
    "ERROR_REMOTE_REJECTED",
    "ERROR_UNREACHABLE",
    "ExaError",
]
