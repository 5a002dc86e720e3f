"""Constants for the Exa API boundary."""

from __future__ import annotations

from typing import Final

EXA_API_BASE_URL: Final[str] = "https://api.exa.ai"
EXA_API_KEY_ENV: Final[str] = "EXA_API_KEY"

ENDPOINT_SEARCH: Final[str] = "/search"
ENDPOINT_CONTEXT: Final[str] = "/context"
ENDPOINT_CONTENTS: Final[str] = "/contents"
ENDPOINT_RESEARCH_TASKS: Final[str] = "/research/v0/tasks"

DEFAULT_NUM_RESULTS: Final[int] = 5
DEFAULT_DEEP_SEARCH_NUM_RESULTS: Final[int] = 10
DEFAULT_MAX_CHARACTERS: Final[int] = 3000
DEFAULT_CODE_TOKENS: Final[int] = 3000
MAX_CODE_TOKENS: Final[int] = 500_000

SEARCH_TIMEOUT_SECONDS: Final[float] = 25.0
CONTEXT_TIMEOUT_SECONDS: Final[float] = 30.0
RESEARCH_TIMEOUT_SECONDS: Final[float] = 25.0

SERVER_NAME: Final[str] = "exa-search-server"
SERVER_TITLE: Final[str] = "Exa"
TOOLS_LIST_URI: Final[str] = "exa://tools/list"

JSON_INDENT: Final[int] = 2
