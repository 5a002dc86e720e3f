"""Pytest fixtures for Exa MCP tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import httpx
import pytest
from hypothesis import Phase, Verbosity, settings

from exa_mcp.core.client import ExaClient

if TYPE_CHECKING:
    from collections.abc import Callable

    Route = tuple[int, Any] | Exception | Callable[[httpx.Request], httpx.Response]


settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture(autouse=True)
def _no_ambient_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's EXA_API_KEY out of tests."""
    monkeypatch.delenv("EXA_API_KEY", raising=False)


@pytest.fixture
def exa_routes() -> dict[tuple[str, str], Route]:
    """Route table ``(method, path) -> (status, json body) | exception | callable``."""
    return {}


@pytest.fixture
def captured_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def exa_client(
    exa_routes: dict[tuple[str, str], Route],
    captured_requests: list[httpx.Request],
) -> ExaClient:
    """ExaClient backed by ``httpx.MockTransport`` serving ``exa_routes``."""

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        route = exa_routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.url.path}"})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        status, body = route
        if isinstance(body, str | bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    return ExaClient("test-key", transport=httpx.MockTransport(_handler))
