"""MCP tool registrars: capability id -> registration function, plus prompts and resources."""

# ruff: noqa: N803
from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Annotated, Final, TypeAlias

from mcp.types import CallToolResult, ToolAnnotations
from pydantic import Field

from exa_mcp.core.capabilities import (
    CAPABILITIES,
    CODE_CONTEXT,
    COMPANY_RESEARCH,
    CRAWLING,
    DEEP_RESEARCHER_CHECK,
    DEEP_RESEARCHER_START,
    DEEP_SEARCH,
    LINKEDIN_SEARCH,
    WEB_SEARCH,
    CapabilityDescriptor,
)
from exa_mcp.core.constants import (
    DEFAULT_CODE_TOKENS,
    JSON_INDENT,
    MAX_CODE_TOKENS,
    TOOLS_LIST_URI,
)
from exa_mcp.core.research import ResearchModel
from exa_mcp.mcp.models import CapabilityInfo
from exa_mcp.mcp.tools import LinkedInSearchType, LivecrawlMode

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from exa_mcp.mcp.tools import CapabilityHandlers

logger = logging.getLogger(__name__)

Registrar: TypeAlias = Callable[["FastMCP", "CapabilityHandlers"], None]

READ_ONLY: Final[ToolAnnotations] = ToolAnnotations(
    readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True
)
MUTATING: Final[ToolAnnotations] = ToolAnnotations(
    readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=True
)

_NUM_RESULTS_FIELD = Field(description="Number of search results to return (default: 5)", ge=1)

# ---------------------------------------------------------------------------
# Single-phase capabilities
# ---------------------------------------------------------------------------


def register_web_search(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=WEB_SEARCH,
        description=(
            "Search the web using Exa AI - performs real-time web searches and can scrape "
            "content from specific URLs. Returns the content from the most relevant websites."
        ),
        annotations=READ_ONLY,
    )
    async def web_search_exa(
        query: Annotated[str, Field(description="Search query")],
        numResults: Annotated[int | None, _NUM_RESULTS_FIELD] = None,
    ) -> CallToolResult:
        return await handlers.web_search(query, numResults)


def register_code_context(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=CODE_CONTEXT,
        description=(
            "Search and get relevant code snippets, examples, and documentation from open "
            "source libraries, GitHub repositories, and programming frameworks. Use this "
            "whenever you need to understand how to use a specific library, find code "
            "examples, see implementation patterns, or get current documentation for any "
            "programming language, framework, or open source package."
        ),
        annotations=READ_ONLY,
    )
    async def get_code_context_exa(
        query: Annotated[
            str,
            Field(
                description=(
                    "Search query to find relevant code snippets, library documentation, or "
                    "implementation examples. Be specific about the programming language, "
                    "library name, function, or concept (e.g., 'React useState hook examples')."
                )
            ),
        ],
        tokensNum: Annotated[
            int,
            Field(
                description=(
                    "Maximum number of tokens to return in the response. Higher values provide "
                    "more comprehensive code examples and documentation"
                ),
                ge=1,
                le=MAX_CODE_TOKENS,
            ),
        ] = DEFAULT_CODE_TOKENS,
    ) -> CallToolResult:
        return await handlers.code_context(query, tokensNum)


def register_deep_search(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=DEEP_SEARCH,
        description=(
            "Searches the web and return results in a natural language format. Deep search "
            "uses smart query expansion and provides high-quality summaries for each result. "
            "You can provide query variations for even better results."
        ),
        annotations=READ_ONLY,
    )
    async def deep_search_exa(
        objective: Annotated[
            str,
            Field(
                description=(
                    "Query: Description of what the web search is looking for. Try to make the "
                    "search query atomic - looking for a specific piece of information."
                )
            ),
        ],
        search_queries: Annotated[
            list[str] | None,
            Field(
                description=(
                    "Query Variants: Optional list of keyword search queries, may include "
                    "search operators. Limited to 5 entries of up to 5 words each."
                )
            ),
        ] = None,
        numResults: Annotated[
            int | None,
            Field(description="Number of search results to return (default: 10)", ge=1),
        ] = None,
        livecrawl: Annotated[
            LivecrawlMode | None,
            Field(
                description=(
                    "Live crawl mode - 'fallback': use live crawling as backup if cached "
                    "content unavailable, 'preferred': prioritize live crawling "
                    "(default: 'fallback')"
                )
            ),
        ] = None,
    ) -> CallToolResult:
        return await handlers.deep_search(objective, search_queries, numResults, livecrawl)


def register_crawling(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=CRAWLING,
        description=(
            "Extract and crawl content from specific URLs using Exa AI - retrieves full "
            "text content, metadata, and structured information from web pages."
        ),
        annotations=READ_ONLY,
    )
    async def crawling_exa(
        url: Annotated[str, Field(description="URL to crawl and extract content from")],
        maxCharacters: Annotated[
            int | None,
            Field(description="Maximum characters to extract (default: 3000)", ge=1),
        ] = None,
    ) -> CallToolResult:
        return await handlers.crawl(url, maxCharacters)


def register_linkedin_search(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=LINKEDIN_SEARCH,
        description=(
            "Search LinkedIn profiles and companies using Exa AI - finds professional "
            "profiles, company pages, and business-related content on LinkedIn."
        ),
        annotations=READ_ONLY,
    )
    async def linkedin_search_exa(
        query: Annotated[
            str,
            Field(description="LinkedIn search query (e.g., person name, company, job title)"),
        ],
        searchType: Annotated[
            LinkedInSearchType,
            Field(description="Type of LinkedIn content to search (default: all)"),
        ] = "all",
        numResults: Annotated[int | None, _NUM_RESULTS_FIELD] = None,
    ) -> CallToolResult:
        return await handlers.linkedin_search(query, searchType, numResults)


def register_company_research(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=COMPANY_RESEARCH,
        description=(
            "Research companies using Exa AI - finds comprehensive information about "
            "businesses, organizations, and corporations."
        ),
        annotations=READ_ONLY,
    )
    async def company_research_exa(
        companyName: Annotated[str, Field(description="Name of the company to research")],
        numResults: Annotated[int | None, _NUM_RESULTS_FIELD] = None,
    ) -> CallToolResult:
        return await handlers.company_research(companyName, numResults)


# ---------------------------------------------------------------------------
# Two-phase research capabilities
# ---------------------------------------------------------------------------


def register_research_start(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=DEEP_RESEARCHER_START,
        description=(
            "Start a comprehensive AI-powered deep research task for complex queries. "
            "Returns a task id immediately; call deep_researcher_check with that id to "
            "monitor progress and retrieve the final report."
        ),
        annotations=MUTATING,
    )
    async def deep_researcher_start(
        instructions: Annotated[
            str,
            Field(description="Complex research question or detailed instructions"),
        ],
        model: Annotated[
            ResearchModel,
            Field(
                description=(
                    "Research model: 'exa-research' (faster) or 'exa-research-pro' "
                    "(more comprehensive)"
                )
            ),
        ] = ResearchModel.STANDARD,
        inferSchema: Annotated[
            bool,
            Field(description="Ask the API to infer a structured output schema"),
        ] = False,
    ) -> CallToolResult:
        return await handlers.research_start(instructions, ResearchModel(model), inferSchema)


def register_research_check(mcp: FastMCP, handlers: CapabilityHandlers) -> None:
    @mcp.tool(
        name=DEEP_RESEARCHER_CHECK,
        description=(
            "Check the status of a deep research task and retrieve its report once "
            "completed. Keep calling with the same task id while the status is running."
        ),
        annotations=READ_ONLY,
    )
    async def deep_researcher_check(
        taskId: Annotated[
            str,
            Field(description="Task id returned by deep_researcher_start", min_length=1),
        ],
    ) -> CallToolResult:
        return await handlers.research_check(taskId)


CAPABILITY_REGISTRARS: Final[Mapping[str, Registrar]] = {
    WEB_SEARCH: register_web_search,
    CODE_CONTEXT: register_code_context,
    DEEP_SEARCH: register_deep_search,
    CRAWLING: register_crawling,
    DEEP_RESEARCHER_START: register_research_start,
    DEEP_RESEARCHER_CHECK: register_research_check,
    LINKEDIN_SEARCH: register_linkedin_search,
    COMPANY_RESEARCH: register_company_research,
}


def register_capabilities(
    mcp: FastMCP,
    active: Sequence[str],
    handlers: CapabilityHandlers,
    *,
    registrars: Mapping[str, Registrar] = CAPABILITY_REGISTRARS,
    debug: bool = False,
) -> tuple[str, ...]:
    """Bind each active capability to its handler, in active-set order."""
    registered: list[str] = []
    for capability_id in active:
        registrar = registrars.get(capability_id)
        if registrar is None:
            logger.warning("No registrar for capability %s; skipping", capability_id)
            continue
        registrar(mcp, handlers)
        registered.append(capability_id)
        if debug:
            logger.info("Registered tool %s", capability_id)
    if debug:
        logger.info("Registered %d tools: %s", len(registered), ", ".join(registered))
    return tuple(registered)


# ---------------------------------------------------------------------------
# Prompts and resources
# ---------------------------------------------------------------------------


def register_prompts(mcp: FastMCP) -> None:
    @mcp.prompt(name="web_search_help", description="Get help with web search using Exa")
    def web_search_help() -> str:
        return (
            "I want to search the web for current information. Can you help me search for "
            "recent news about artificial intelligence breakthroughs?"
        )

    @mcp.prompt(
        name="code_search_help",
        description="Get help finding code examples and documentation",
    )
    def code_search_help() -> str:
        return (
            "I need help with a programming task. Can you search for examples of how to "
            "use React hooks for state management?"
        )


def build_tools_list(
    registered: Sequence[str],
    known: Sequence[CapabilityDescriptor] = CAPABILITIES,
) -> list[CapabilityInfo]:
    enabled = set(registered)
    return [
        CapabilityInfo(
            id=descriptor.id,
            name=descriptor.display_name,
            description=descriptor.description,
            enabled=descriptor.id in enabled,
        )
        for descriptor in known
    ]


def register_resources(mcp: FastMCP, registered: Sequence[str]) -> None:
    tools_list = build_tools_list(registered)

    @mcp.resource(
        TOOLS_LIST_URI,
        name="tools_list",
        description="List of available Exa tools and their descriptions",
        mime_type="application/json",
    )
    def tools_list_resource() -> str:
        return json.dumps([info.model_dump() for info in tools_list], indent=JSON_INDENT)


__all__ = [
    "CAPABILITY_REGISTRARS",
    "MUTATING",
    "READ_ONLY",
    "Registrar",
    "build_tools_list",
    "register_capabilities",
    "register_prompts",
    "register_resources",
]
