"""Remote endpoint client for the Exa API.

Each call opens its own ``httpx.AsyncClient`` so concurrent invocations never
share transport state. Calls are single-shot: failures are classified into
:class:`ExaError` and surfaced without retrying.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from exa_mcp.core.constants import (
    CONTEXT_TIMEOUT_SECONDS,
    ENDPOINT_CONTENTS,
    ENDPOINT_CONTEXT,
    ENDPOINT_RESEARCH_TASKS,
    ENDPOINT_SEARCH,
    EXA_API_BASE_URL,
    EXA_API_KEY_ENV,
    RESEARCH_TIMEOUT_SECONDS,
    SEARCH_TIMEOUT_SECONDS,
)
from exa_mcp.core.errors import ExaError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class ExaClient:
    """Thin typed wrapper over the Exa HTTP endpoints.

    ``transport`` is forwarded to every ``httpx.AsyncClient`` and exists so
    tests can plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = EXA_API_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else os.environ.get(EXA_API_KEY_ENV, "")
        self._base_url = base_url
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "accept": "application/json",
            "content-type": "application/json",
            "x-api-key": self._api_key,
        }

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        timeout: float = SEARCH_TIMEOUT_SECONDS,
    ) -> Any:
        """Issue one request and return the decoded JSON body (``None`` when empty)."""
        async with httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers(),
            timeout=httpx.Timeout(timeout),
            transport=self._transport,
        ) as client:
            try:
                response = await client.request(method, path, json=json_body)
            except httpx.TimeoutException as exc:
                logger.debug("Exa %s %s timed out after %.0fs", method, path, timeout)
                raise ExaError.unreachable(f"Request timed out after {timeout:.0f}s") from exc
            except httpx.RequestError as exc:
                logger.debug("Exa %s %s failed: %s", method, path, exc)
                raise ExaError.unreachable(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            raise ExaError.remote_rejected(response.status_code, _error_message(response))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ExaError.malformed_snapshot("Response body is not valid JSON") from exc

    async def search(self, payload: Mapping[str, Any]) -> Any:
        return await self.request("POST", ENDPOINT_SEARCH, json_body=payload)

    async def get_code_context(self, payload: Mapping[str, Any]) -> Any:
        return await self.request(
            "POST", ENDPOINT_CONTEXT, json_body=payload, timeout=CONTEXT_TIMEOUT_SECONDS
        )

    async def get_contents(self, payload: Mapping[str, Any]) -> Any:
        return await self.request("POST", ENDPOINT_CONTENTS, json_body=payload)

    async def create_research_task(self, payload: Mapping[str, Any]) -> Any:
        return await self.request(
            "POST",
            ENDPOINT_RESEARCH_TASKS,
            json_body=payload,
            timeout=RESEARCH_TIMEOUT_SECONDS,
        )

    async def get_research_task(self, task_id: str) -> Any:
        escaped_id = quote(task_id, safe="")
        return await self.request(
            "GET",
            f"{ENDPOINT_RESEARCH_TASKS}/{escaped_id}",
            timeout=RESEARCH_TIMEOUT_SECONDS,
        )


def _error_message(response: httpx.Response) -> str:
    """Extract the remote error message verbatim, falling back to the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
        nested = body.get("response")
        if isinstance(nested, dict) and isinstance(nested.get("message"), str):
            return nested["message"]
    text = response.text.strip()
    if text and body is None:
        return text
    return response.reason_phrase or f"HTTP {response.status_code}"


__all__ = ["ExaClient"]
