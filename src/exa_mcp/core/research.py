"""Two-phase research task lifecycle: submit, then poll until terminal.

The task state machine (``running`` -> ``completed`` | ``failed``) is owned by
the Exa API. :class:`ResearchTaskManager` never caches a snapshot or moves a
task between states locally; every poll is an independent fetch.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from exa_mcp.core.constants import JSON_INDENT
from exa_mcp.core.errors import ExaError

if TYPE_CHECKING:
    from exa_mcp.core.client import ExaClient

logger = logging.getLogger(__name__)

NO_FURTHER_DETAIL: Final[str] = "failed, no further detail"
FAILURE_DETAIL_FIELDS: Final[tuple[str, ...]] = (
    "error",
    "message",
    "reason",
    "failureReason",
    "errorMessage",
)


class ResearchModel(StrEnum):
    """Research model variants accepted by the task endpoint."""

    STANDARD = "exa-research"
    PRO = "exa-research-pro"


class ResearchTaskStatus(StrEnum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class PollOutcomeKind(StrEnum):
    NOT_READY = "not_ready"
    COMPLETED = "completed"
    FAILED = "failed"


class Citation(BaseModel):
    """A source backing one research step."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    source_id: str | int | None = Field(default=None, alias="id")
    url: str | None = None
    title: str | None = None
    snippet: str | None = None


class ResearchUsage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    searches: float = 0
    pages: float = 0
    reasoning_tokens: float = Field(default=0, alias="reasoningTokens")


class CostSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    total: float = 0
    research: ResearchUsage | None = None


class ResearchTask(BaseModel):
    """Server-reported snapshot of a research task.

    Unknown fields are retained in ``model_extra`` so failure diagnostics the
    server attaches can be surfaced verbatim.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(min_length=1)
    status: ResearchTaskStatus
    created_at: float | str | None = Field(default=None, alias="createdAt")
    instructions: str | None = None
    partial_data: dict[str, Any] | None = Field(default=None, alias="data")
    citations: dict[str, list[Citation]] | None = None
    cost_summary: CostSummary | None = Field(default=None, alias="costDollars")
    operations: list[dict[str, Any]] | None = None
    time_ms: float | None = Field(default=None, alias="timeMs")
    model: str | None = None
    output_schema: dict[str, Any] | None = Field(default=None, alias="schema")

    @field_validator(
        "created_at",
        "instructions",
        "citations",
        "cost_summary",
        "operations",
        "time_ms",
        "model",
        "output_schema",
        mode="wrap",
    )
    @classmethod
    def _drop_unparseable(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        """Auxiliary fields never decide validity; unreadable ones become ``None``."""
        try:
            return handler(value)
        except ValidationError:
            logger.debug("Ignoring unparseable research task field %s", info.field_name)
            return None

    @property
    def report(self) -> str | None:
        if self.partial_data is None:
            return None
        report = self.partial_data.get("report")
        return report if isinstance(report, str) else None

    def failure_details(self) -> dict[str, Any]:
        """Diagnostic fields carried by a failed snapshot, in a stable order."""
        extra = self.model_extra or {}
        return {
            key: extra[key]
            for key in FAILURE_DETAIL_FIELDS
            if extra.get(key) not in (None, "", {}, [])
        }


@dataclass(frozen=True, slots=True)
class ResearchSubmission:
    """Result of submitting a research task."""

    task_id: str
    model: ResearchModel
    instructions: str
    output_schema: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """Caller-facing interpretation of one poll snapshot."""

    kind: PollOutcomeKind
    text: str
    task: ResearchTask

    @property
    def is_error(self) -> bool:
        return self.kind is PollOutcomeKind.FAILED


class ResearchTaskManager:
    """Client view of the remote research task state machine.

    No polling cadence is enforced here; the caller decides when to poll.
    """

    def __init__(self, client: ExaClient) -> None:
        self._client = client

    async def submit(
        self,
        instructions: str,
        model: ResearchModel = ResearchModel.STANDARD,
        *,
        infer_output_schema: bool = False,
    ) -> ResearchSubmission:
        """Create a research task. Failures propagate as :class:`ExaError`, never retried."""
        payload: dict[str, Any] = {"model": str(model), "instructions": instructions}
        if infer_output_schema:
            payload["output"] = {"inferSchema": True}

        raw = await self._client.create_research_task(payload)
        if not isinstance(raw, dict):
            raise ExaError.malformed_snapshot("Research task response is not a JSON object")
        task_id = raw.get("id")
        if not isinstance(task_id, str) or not task_id:
            raise ExaError.malformed_snapshot("Research task response is missing a task id")

        output_schema = raw.get("outputSchema")
        logger.debug("Submitted research task %s with model %s", task_id, model)
        return ResearchSubmission(
            task_id=task_id,
            model=model,
            instructions=instructions,
            output_schema=output_schema if isinstance(output_schema, dict) else None,
        )

    async def poll(self, task_id: str) -> ResearchTask:
        """Fetch the current server-reported snapshot for ``task_id``."""
        raw = await self._client.get_research_task(task_id)
        return parse_snapshot(raw)


def parse_snapshot(raw: object) -> ResearchTask:
    if not isinstance(raw, dict):
        raise ExaError.malformed_snapshot("Research task snapshot is not a JSON object")
    try:
        return ResearchTask.model_validate(raw)
    except ValidationError as exc:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "<root>" for error in exc.errors()
        )
        raise ExaError.malformed_snapshot(
            f"Research task snapshot has invalid or missing fields: {fields}"
        ) from exc


def resolve_poll_outcome(task: ResearchTask) -> PollOutcome:
    """Map a snapshot onto not-ready, completed, or failed.

    Raises :class:`ExaError` (``MALFORMED_SNAPSHOT``) when a completed task
    carries no data at all.
    """
    if task.status is ResearchTaskStatus.RUNNING:
        return PollOutcome(PollOutcomeKind.NOT_READY, _running_text(task), task)

    if task.status is ResearchTaskStatus.FAILED:
        details = task.failure_details()
        if details:
            detail_text = "; ".join(
                f"{key}: {_detail_value(value)}" for key, value in details.items()
            )
            text = f"Research task {task.id} failed: {detail_text}"
        else:
            text = f"Research task {task.id} {NO_FURTHER_DETAIL}."
        return PollOutcome(PollOutcomeKind.FAILED, text, task)

    report = task.report
    if report is not None:
        return PollOutcome(PollOutcomeKind.COMPLETED, report, task)
    if not task.partial_data:
        raise ExaError.malformed_snapshot(
            f"Research task {task.id} is completed but returned no data"
        )
    return PollOutcome(
        PollOutcomeKind.COMPLETED,
        json.dumps(task.partial_data, indent=JSON_INDENT),
        task,
    )


def _running_text(task: ResearchTask) -> str:
    body: dict[str, Any] = {
        "taskId": task.id,
        "status": str(task.status),
        "message": "Research is still in progress.",
        "nextStep": f"Call deep_researcher_check again with taskId '{task.id}'.",
    }
    if task.report is not None:
        body["partialReport"] = task.report
    return json.dumps(body, indent=JSON_INDENT)


def _detail_value(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


__all__ = [
    "NO_FURTHER_DETAIL",
    "Citation",
    "CostSummary",
    "PollOutcome",
    "PollOutcomeKind",
    "ResearchModel",
    "ResearchSubmission",
    "ResearchTask",
    "ResearchTaskManager",
    "ResearchTaskStatus",
    "ResearchUsage",
    "parse_snapshot",
    "resolve_poll_outcome",
]
