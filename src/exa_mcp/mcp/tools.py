"""Capability handlers: one remote call per invocation, mapped to an envelope."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Literal

from exa_mcp.core.capabilities import (
    CODE_CONTEXT,
    COMPANY_RESEARCH,
    CRAWLING,
    DEEP_RESEARCHER_CHECK,
    DEEP_RESEARCHER_START,
    DEEP_SEARCH,
    LINKEDIN_SEARCH,
    WEB_SEARCH,
)
from exa_mcp.core.constants import (
    DEFAULT_CODE_TOKENS,
    DEFAULT_DEEP_SEARCH_NUM_RESULTS,
    DEFAULT_MAX_CHARACTERS,
    DEFAULT_NUM_RESULTS,
    JSON_INDENT,
)
from exa_mcp.core.errors import ExaError
from exa_mcp.core.request_log import RequestLogger
from exa_mcp.core.research import (
    ResearchModel,
    ResearchTaskManager,
    resolve_poll_outcome,
)
from exa_mcp.mcp.models import ResearchStartResponse, error_result, text_result

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mcp.types import CallToolResult

    from exa_mcp.core.client import ExaClient

logger = logging.getLogger(__name__)

LivecrawlMode = Literal["fallback", "preferred"]
LinkedInSearchType = Literal["profiles", "companies", "all"]

NO_SEARCH_RESULTS = (
    "No search results found. Please try a different query or adjust your search parameters."
)
NO_CODE_RESULTS = (
    "No code snippets or documentation found. Please try a different query, be more "
    "specific about the library or programming concept, or check the spelling of "
    "framework names."
)
NO_CRAWL_RESULTS = "No content found for the provided URL. Check the URL and try again."
NO_COMPANY_RESULTS = "No company information found. Try the company's full legal name."
NO_LINKEDIN_RESULTS = "No LinkedIn results found. Try a different name or company."

_LINKEDIN_QUERY_SUFFIX: dict[str, str] = {
    "profiles": "LinkedIn profile",
    "companies": "LinkedIn company page",
    "all": "LinkedIn",
}
_LINKEDIN_DOMAINS: dict[str, list[str]] = {
    "profiles": ["linkedin.com/in"],
    "companies": ["linkedin.com/company"],
    "all": ["linkedin.com"],
}


def format_exa_error(label: str, exc: ExaError) -> str:
    """Render an API failure as "<label> error (<status>): <message>. <hint>"."""
    status = f" ({exc.status_code})" if exc.status_code is not None else ""
    text = f"{label} error{status}: {exc.message}"
    if exc.hint:
        separator = " " if text.endswith((".", "!", "?")) else ". "
        text = f"{text}{separator}{exc.hint}"
    return text


def _has_results(raw: object) -> bool:
    if not isinstance(raw, dict):
        return False
    results = raw.get("results")
    return isinstance(results, list) and len(results) > 0


class CapabilityHandlers:
    """Handlers for every catalog capability.

    Each handler builds exactly one request (or delegates to the research
    task manager) and always returns an envelope; no exception escapes.
    """

    def __init__(self, client: ExaClient, research: ResearchTaskManager | None = None) -> None:
        self._client = client
        self._research = research if research is not None else ResearchTaskManager(client)

    async def _guarded(
        self,
        request_log: RequestLogger,
        label: str,
        operation: Callable[[], Awaitable[CallToolResult]],
    ) -> CallToolResult:
        try:
            result = await operation()
        except ExaError as exc:
            request_log.error(exc)
            return error_result(format_exa_error(label, exc))
        except Exception as exc:
            logger.exception("Unexpected failure in %s", request_log.tool_name)
            return error_result(f"{label} error: {exc}")
        request_log.complete()
        return result

    async def _search(
        self,
        request_log: RequestLogger,
        label: str,
        payload: dict[str, Any],
        empty_message: str,
    ) -> CallToolResult:
        async def operation() -> CallToolResult:
            request_log.log("Sending request to Exa API")
            raw = await self._client.search(payload)
            if not _has_results(raw):
                request_log.log("Warning: Empty or invalid response from Exa API")
                return text_result(empty_message)
            request_log.log(f"Received {len(raw['results'])} results")
            return text_result(json.dumps(raw, indent=JSON_INDENT))

        return await self._guarded(request_log, label, operation)

    async def web_search(self, query: str, num_results: int | None = None) -> CallToolResult:
        request_log = RequestLogger(WEB_SEARCH)
        request_log.start(query)
        payload = {
            "query": query,
            "type": "auto",
            "numResults": num_results or DEFAULT_NUM_RESULTS,
            "contents": {
                "text": {"maxCharacters": DEFAULT_MAX_CHARACTERS},
                "livecrawl": "fallback",
            },
        }
        return await self._search(request_log, "Search", payload, NO_SEARCH_RESULTS)

    async def deep_search(
        self,
        objective: str,
        search_queries: list[str] | None = None,
        num_results: int | None = None,
        livecrawl: LivecrawlMode | None = None,
    ) -> CallToolResult:
        request_log = RequestLogger(DEEP_SEARCH)
        request_log.start(objective)
        payload: dict[str, Any] = {
            "query": objective,
            "type": "deep",
            "numResults": num_results or DEFAULT_DEEP_SEARCH_NUM_RESULTS,
            "contents": {"text": False, "summary": True, "livecrawl": livecrawl or "fallback"},
        }
        if search_queries:
            payload["queryVariants"] = search_queries
            request_log.log(f"Using {len(search_queries)} query variants")
        else:
            request_log.log("Using automatic query expansion")
        return await self._search(request_log, "Deep search", payload, NO_SEARCH_RESULTS)

    async def company_research(
        self, company_name: str, num_results: int | None = None
    ) -> CallToolResult:
        request_log = RequestLogger(COMPANY_RESEARCH)
        request_log.start(company_name)
        payload = {
            "query": f"{company_name} company",
            "type": "auto",
            "category": "company",
            "numResults": num_results or DEFAULT_NUM_RESULTS,
            "contents": {"text": {"maxCharacters": DEFAULT_MAX_CHARACTERS}},
        }
        return await self._search(request_log, "Company research", payload, NO_COMPANY_RESULTS)

    async def linkedin_search(
        self,
        query: str,
        search_type: LinkedInSearchType = "all",
        num_results: int | None = None,
    ) -> CallToolResult:
        request_log = RequestLogger(LINKEDIN_SEARCH)
        request_log.start(f"{query} ({search_type})")
        payload = {
            "query": f"{query} {_LINKEDIN_QUERY_SUFFIX[search_type]}",
            "type": "keyword",
            "includeDomains": list(_LINKEDIN_DOMAINS[search_type]),
            "numResults": num_results or DEFAULT_NUM_RESULTS,
            "contents": {"text": {"maxCharacters": DEFAULT_MAX_CHARACTERS}},
        }
        return await self._search(request_log, "LinkedIn search", payload, NO_LINKEDIN_RESULTS)

    async def crawl(self, url: str, max_characters: int | None = None) -> CallToolResult:
        request_log = RequestLogger(CRAWLING)
        request_log.start(url)
        payload = {
            "ids": [url],
            "text": {"maxCharacters": max_characters or DEFAULT_MAX_CHARACTERS},
            "livecrawl": "preferred",
        }

        async def operation() -> CallToolResult:
            request_log.log("Sending crawl request to Exa API")
            raw = await self._client.get_contents(payload)
            if not _has_results(raw):
                request_log.log("Warning: Empty or invalid response from Exa API")
                return text_result(NO_CRAWL_RESULTS)
            return text_result(json.dumps(raw, indent=JSON_INDENT))

        return await self._guarded(request_log, "Crawling", operation)

    async def code_context(
        self, query: str, tokens_num: int = DEFAULT_CODE_TOKENS
    ) -> CallToolResult:
        request_log = RequestLogger(CODE_CONTEXT)
        request_log.start(f"Searching for code context: {query}")
        payload = {"query": query, "tokensNum": tokens_num}

        async def operation() -> CallToolResult:
            request_log.log("Sending code context request to Exa API")
            raw = await self._client.get_code_context(payload)
            content = raw.get("response") if isinstance(raw, dict) else None
            if content is None or content == "":
                request_log.log("Warning: Empty response from Exa Code API")
                return text_result(NO_CODE_RESULTS)
            request_log.log(f"Code search completed with {raw.get('resultsCount') or 0} results")
            if isinstance(content, str):
                return text_result(content)
            return text_result(json.dumps(content, indent=JSON_INDENT))

        return await self._guarded(request_log, "Code search", operation)

    async def research_start(
        self,
        instructions: str,
        model: ResearchModel = ResearchModel.STANDARD,
        infer_schema: bool = False,
    ) -> CallToolResult:
        request_log = RequestLogger(DEEP_RESEARCHER_START)
        request_log.start(instructions)

        async def operation() -> CallToolResult:
            submission = await self._research.submit(
                instructions, model, infer_output_schema=infer_schema
            )
            request_log.log(f"Research task started with id {submission.task_id}")
            response = ResearchStartResponse(
                taskId=submission.task_id,
                model=str(submission.model),
                instructions=submission.instructions,
                outputSchema=submission.output_schema,
                message="Research task started. Results are not ready yet.",
                nextStep=(
                    f"Call deep_researcher_check with taskId '{submission.task_id}' "
                    "to monitor progress and retrieve the report."
                ),
            )
            return text_result(response.model_dump_json(indent=JSON_INDENT, exclude_none=True))

        return await self._guarded(request_log, "Research start", operation)

    async def research_check(self, task_id: str) -> CallToolResult:
        request_log = RequestLogger(DEEP_RESEARCHER_CHECK)
        request_log.start(task_id)
        if not task_id.strip():
            return error_result("Research check error: taskId must not be empty.")

        async def operation() -> CallToolResult:
            task = await self._research.poll(task_id)
            outcome = resolve_poll_outcome(task)
            request_log.log(f"Task {task.id} status: {task.status}")
            if outcome.is_error:
                return error_result(outcome.text)
            return text_result(outcome.text)

        return await self._guarded(request_log, "Research check", operation)


__all__ = ["CapabilityHandlers", "format_exa_error"]
