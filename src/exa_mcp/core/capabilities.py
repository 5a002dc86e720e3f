"""Capability catalog and active-set computation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

    from exa_mcp.core.config import ExaMCPConfig

WEB_SEARCH: Final[str] = "web_search_exa"
CODE_CONTEXT: Final[str] = "get_code_context_exa"
DEEP_SEARCH: Final[str] = "deep_search_exa"
CRAWLING: Final[str] = "crawling_exa"
DEEP_RESEARCHER_START: Final[str] = "deep_researcher_start"
DEEP_RESEARCHER_CHECK: Final[str] = "deep_researcher_check"
LINKEDIN_SEARCH: Final[str] = "linkedin_search_exa"
COMPANY_RESEARCH: Final[str] = "company_research_exa"


@dataclass(frozen=True, slots=True)
class CapabilityDescriptor:
    """Static metadata for one remotely backed tool."""

    id: str
    display_name: str
    description: str
    default_enabled: bool = False


CAPABILITIES: Final[tuple[CapabilityDescriptor, ...]] = (
    CapabilityDescriptor(
        WEB_SEARCH,
        "Web Search (Exa)",
        "Real-time web search using Exa AI",
        default_enabled=True,
    ),
    CapabilityDescriptor(
        CODE_CONTEXT,
        "Code Context Search",
        "Search for code snippets, examples, and documentation from open source repositories",
        default_enabled=True,
    ),
    CapabilityDescriptor(
        DEEP_SEARCH,
        "Deep Search (Exa)",
        "Advanced web search with query expansion and high-quality summaries",
    ),
    CapabilityDescriptor(CRAWLING, "Web Crawling", "Extract content from specific URLs"),
    CapabilityDescriptor(
        DEEP_RESEARCHER_START,
        "Deep Researcher Start",
        "Start a comprehensive AI research task",
    ),
    CapabilityDescriptor(
        DEEP_RESEARCHER_CHECK,
        "Deep Researcher Check",
        "Check status and retrieve results of research task",
    ),
    CapabilityDescriptor(
        LINKEDIN_SEARCH, "LinkedIn Search", "Search LinkedIn profiles and companies"
    ),
    CapabilityDescriptor(
        COMPANY_RESEARCH, "Company Research", "Research companies and organizations"
    ),
)


def compute_active_set(
    config: ExaMCPConfig,
    known: Sequence[CapabilityDescriptor] = CAPABILITIES,
) -> tuple[str, ...]:
    """Return the ids to expose for a server instance.

    Requested ids keep their request order (first occurrence wins) and unknown
    ids are dropped. An empty request falls back to the default-enabled
    descriptors in catalog order.
    """
    known_ids = [descriptor.id for descriptor in known]
    if len(set(known_ids)) != len(known_ids):
        raise ValueError("Capability descriptors must have unique ids")

    requested = config.enabled_capabilities
    if requested:
        valid = set(known_ids)
        return tuple(dict.fromkeys(tool_id for tool_id in requested if tool_id in valid))
    return tuple(descriptor.id for descriptor in known if descriptor.default_enabled)


def get_descriptor(
    capability_id: str,
    known: Sequence[CapabilityDescriptor] = CAPABILITIES,
) -> CapabilityDescriptor | None:
    for descriptor in known:
        if descriptor.id == capability_id:
            return descriptor
    return None


__all__ = [
    "CAPABILITIES",
    "CODE_CONTEXT",
    "COMPANY_RESEARCH",
    "CRAWLING",
    "DEEP_RESEARCHER_CHECK",
    "DEEP_RESEARCHER_START",
    "DEEP_SEARCH",
    "LINKEDIN_SEARCH",
    "WEB_SEARCH",
    "CapabilityDescriptor",
    "compute_active_set",
    "get_descriptor",
]
