"""Installed package version lookup."""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version

from exa_mcp import __version__

DISTRIBUTION_NAME = "exa-mcp"


@lru_cache(maxsize=1)
def get_exa_mcp_version() -> str:
    """Version from installed metadata; source checkouts report ``exa_mcp.__version__``."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return __version__


__all__ = ["DISTRIBUTION_NAME", "get_exa_mcp_version"]
