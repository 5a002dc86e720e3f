"""Contract tests for capability handler envelopes."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest

from exa_mcp.core.errors import ERROR_UNREACHABLE, ExaError
from exa_mcp.core.research import ResearchModel
from exa_mcp.mcp.models import result_text
from exa_mcp.mcp.tools import (
    NO_CODE_RESULTS,
    NO_COMPANY_RESULTS,
    NO_CRAWL_RESULTS,
    NO_LINKEDIN_RESULTS,
    NO_SEARCH_RESULTS,
    CapabilityHandlers,
    format_exa_error,
)

if TYPE_CHECKING:
    from exa_mcp.core.client import ExaClient

SEARCH_HIT = {
    "requestId": "req-1",
    "results": [
        {"id": "https://example.com", "url": "https://example.com", "title": "Example"}
    ],
}


@pytest.fixture
def handlers(exa_client: ExaClient) -> CapabilityHandlers:
    return CapabilityHandlers(exa_client)


def _sent_json(captured_requests: list[httpx.Request], index: int = 0) -> dict:
    return json.loads(captured_requests[index].content)


# ---------------------------------------------------------------------------
# Search-backed capabilities
# ---------------------------------------------------------------------------


class TestWebSearch:
    async def test_results_are_returned_as_pretty_json(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
    ) -> None:
        exa_routes[("POST", "/search")] = (200, SEARCH_HIT)

        result = await handlers.web_search("latest python release")

        assert result.isError is False
        assert json.loads(result_text(result)) == SEARCH_HIT
        body = _sent_json(captured_requests)
        assert body["query"] == "latest python release"
        assert body["type"] == "auto"
        assert body["numResults"] == 5
        assert body["contents"]["livecrawl"] == "fallback"

    async def test_explicit_result_count_is_forwarded(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
    ) -> None:
        exa_routes[("POST", "/search")] = (200, SEARCH_HIT)

        await handlers.web_search("q", 12)

        assert _sent_json(captured_requests)["numResults"] == 12

    @pytest.mark.parametrize("body", [{"results": []}, {}, {"results": None}])
    async def test_empty_results_are_a_normal_answer(
        self, handlers: CapabilityHandlers, exa_routes: dict, body: dict
    ) -> None:
        exa_routes[("POST", "/search")] = (200, body)

        result = await handlers.web_search("nothing matches this")

        assert result.isError is False
        assert result_text(result) == NO_SEARCH_RESULTS

    async def test_rejection_mentions_status_and_hint(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/search")] = (401, {"message": "Invalid API key"})

        result = await handlers.web_search("q")

        assert result.isError is True
        text = result_text(result)
        assert text.startswith("Search error (401): Invalid API key")
        assert "API key" in text
        assert "Traceback" not in text

    async def test_unreachable_service_is_an_error_envelope(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/search")] = httpx.ConnectError("connection refused")

        result = await handlers.web_search("q")

        assert result.isError is True
        text = result_text(result)
        assert text.startswith("Search error: ")
        assert "network" in text
        assert "Traceback" not in text


class TestDeepSearch:
    async def test_query_variants_and_livecrawl_are_forwarded(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
    ) -> None:
        exa_routes[("POST", "/search")] = (200, SEARCH_HIT)

        result = await handlers.deep_search(
            "vector database benchmarks",
            ["pgvector benchmark", "qdrant vs milvus"],
            livecrawl="preferred",
        )

        assert result.isError is False
        body = _sent_json(captured_requests)
        assert body["type"] == "deep"
        assert body["numResults"] == 10
        assert body["queryVariants"] == ["pgvector benchmark", "qdrant vs milvus"]
        assert body["contents"]["livecrawl"] == "preferred"
        assert body["contents"]["summary"] is True

    async def test_without_variants_omits_them(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
    ) -> None:
        exa_routes[("POST", "/search")] = (200, {"results": []})

        result = await handlers.deep_search("objective")

        assert result_text(result) == NO_SEARCH_RESULTS
        assert "queryVariants" not in _sent_json(captured_requests)


class TestCompanyAndLinkedIn:
    async def test_company_research_targets_company_category(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
    ) -> None:
        exa_routes[("POST", "/search")] = (200, SEARCH_HIT)

        await handlers.company_research("Exa Labs", 3)

        body = _sent_json(captured_requests)
        assert body["query"] == "Exa Labs company"
        assert body["category"] == "company"
        assert body["numResults"] == 3

    async def test_company_research_empty(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/search")] = (200, {"results": []})

        result = await handlers.company_research("Nobody Inc")

        assert result.isError is False
        assert result_text(result) == NO_COMPANY_RESULTS

    @pytest.mark.parametrize(
        ("search_type", "domains"),
        [
            ("profiles", ["linkedin.com/in"]),
            ("companies", ["linkedin.com/company"]),
            ("all", ["linkedin.com"]),
        ],
    )
    async def test_linkedin_search_restricts_domains(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
        search_type: str,
        domains: list[str],
    ) -> None:
        exa_routes[("POST", "/search")] = (200, SEARCH_HIT)

        await handlers.linkedin_search("Jane Doe", search_type)  # type: ignore[arg-type]

        body = _sent_json(captured_requests)
        assert body["includeDomains"] == domains
        assert body["query"].startswith("Jane Doe ")

    async def test_linkedin_search_empty(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/search")] = (200, {"results": []})

        result = await handlers.linkedin_search("nobody")

        assert result_text(result) == NO_LINKEDIN_RESULTS


# ---------------------------------------------------------------------------
# Contents and code context
# ---------------------------------------------------------------------------


class TestCrawl:
    async def test_crawl_requests_single_url(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
    ) -> None:
        exa_routes[("POST", "/contents")] = (200, SEARCH_HIT)

        result = await handlers.crawl("https://example.com", 500)

        assert result.isError is False
        body = _sent_json(captured_requests)
        assert body["ids"] == ["https://example.com"]
        assert body["text"] == {"maxCharacters": 500}
        assert body["livecrawl"] == "preferred"

    async def test_crawl_without_content(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/contents")] = (200, {"results": []})

        result = await handlers.crawl("https://example.com/missing")

        assert result.isError is False
        assert result_text(result) == NO_CRAWL_RESULTS

    async def test_crawl_server_error(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/contents")] = (503, "Service Unavailable")

        result = await handlers.crawl("https://example.com")

        assert result.isError is True
        assert result_text(result).startswith("Crawling error (503)")


class TestCodeContext:
    async def test_text_response_is_returned_verbatim(
        self,
        handlers: CapabilityHandlers,
        exa_routes: dict,
        captured_requests: list[httpx.Request],
    ) -> None:
        snippet = "## useState\n\n```js\nconst [count, setCount] = useState(0);\n```"
        exa_routes[("POST", "/context")] = (200, {"response": snippet, "resultsCount": 4})

        result = await handlers.code_context("react useState", 5000)

        assert result.isError is False
        assert result_text(result) == snippet
        assert _sent_json(captured_requests) == {"query": "react useState", "tokensNum": 5000}

    async def test_structured_response_is_serialized(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/context")] = (200, {"response": {"snippets": ["a", "b"]}})

        result = await handlers.code_context("q")

        assert json.loads(result_text(result)) == {"snippets": ["a", "b"]}

    @pytest.mark.parametrize("body", [{"response": ""}, {}, {"response": None}])
    async def test_empty_response(
        self, handlers: CapabilityHandlers, exa_routes: dict, body: dict
    ) -> None:
        exa_routes[("POST", "/context")] = (200, body)

        result = await handlers.code_context("q")

        assert result.isError is False
        assert result_text(result) == NO_CODE_RESULTS

    async def test_timeout_is_reported_as_unreachable(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/context")] = httpx.ReadTimeout("read timed out")

        result = await handlers.code_context("q")

        assert result.isError is True
        assert "timed out" in result_text(result)


# ---------------------------------------------------------------------------
# Two-phase research
# ---------------------------------------------------------------------------


class TestResearch:
    async def test_start_returns_task_id_and_next_step(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("POST", "/research/v0/tasks")] = (201, {"id": "task-9"})

        result = await handlers.research_start("Survey MCP servers", ResearchModel.PRO)

        assert result.isError is False
        body = json.loads(result_text(result))
        assert body["success"] is True
        assert body["taskId"] == "task-9"
        assert body["model"] == "exa-research-pro"
        assert "outputSchema" not in body
        assert "deep_researcher_check" in body["nextStep"]

    async def test_start_rejection(self, handlers: CapabilityHandlers, exa_routes: dict) -> None:
        exa_routes[("POST", "/research/v0/tasks")] = (429, {"error": "Too many requests"})

        result = await handlers.research_start("Q")

        assert result.isError is True
        assert result_text(result).startswith("Research start error (429): Too many requests")

    async def test_check_running_is_not_an_error(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("GET", "/research/v0/tasks/task-9")] = (
            200,
            {"id": "task-9", "status": "running"},
        )

        result = await handlers.research_check("task-9")

        assert result.isError is False
        assert json.loads(result_text(result))["status"] == "running"

    async def test_check_completed_returns_report(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("GET", "/research/v0/tasks/task-9")] = (
            200,
            {"id": "task-9", "status": "completed", "data": {"report": "# Findings"}},
        )

        result = await handlers.research_check("task-9")

        assert result.isError is False
        assert result_text(result) == "# Findings"

    async def test_check_failed_is_an_error_envelope(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("GET", "/research/v0/tasks/task-9")] = (
            200,
            {"id": "task-9", "status": "failed"},
        )

        result = await handlers.research_check("task-9")

        assert result.isError is True
        assert result_text(result) == "Research task task-9 failed, no further detail."

    async def test_check_completed_without_data_is_malformed(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("GET", "/research/v0/tasks/task-9")] = (
            200,
            {"id": "task-9", "status": "completed", "data": {}},
        )

        result = await handlers.research_check("task-9")

        assert result.isError is True
        assert result_text(result).startswith("Research check error: ")
        assert "no data" in result_text(result)

    async def test_check_unknown_task(
        self, handlers: CapabilityHandlers, exa_routes: dict
    ) -> None:
        exa_routes[("GET", "/research/v0/tasks/nope")] = (404, {"message": "Task not found"})

        result = await handlers.research_check("nope")

        assert result.isError is True
        assert result_text(result).startswith("Research check error (404): Task not found")

    @pytest.mark.parametrize("task_id", ["", "   "])
    async def test_check_blank_task_id_is_rejected_without_a_request(
        self,
        handlers: CapabilityHandlers,
        captured_requests: list[httpx.Request],
        task_id: str,
    ) -> None:
        result = await handlers.research_check(task_id)

        assert result.isError is True
        assert result_text(result) == "Research check error: taskId must not be empty."
        assert captured_requests == []

    async def test_check_escapes_task_id_in_request_path(
        self,
        handlers: CapabilityHandlers,
        captured_requests: list[httpx.Request],
    ) -> None:
        result = await handlers.research_check("../../../search?x=1")

        assert result.isError is True
        [request] = captured_requests
        assert request.url.raw_path.startswith(b"/research/v0/tasks/")
        assert request.url.query == b""


class TestUnexpectedFailures:
    async def test_unexpected_exception_never_escapes(self, exa_client: ExaClient) -> None:
        class _BrokenResearch:
            async def poll(self, task_id: str) -> object:
                raise RuntimeError("boom")

        broken = _BrokenResearch()
        handlers = CapabilityHandlers(exa_client, research=broken)  # type: ignore[arg-type]

        result = await handlers.research_check("task-1")

        assert result.isError is True
        assert result_text(result) == "Research check error: boom"


def test_format_exa_error_without_status_or_hint() -> None:
    exc = ExaError(code=ERROR_UNREACHABLE, message="socket closed")

    assert format_exa_error("Search", exc) == "Search error: socket closed"
