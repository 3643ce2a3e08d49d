"""Shared test fixtures for sparkmail.

Provides a scripted ``httpx`` handler that answers with a fixed sequence of
statuses and records every request it sees, factories for sync and async
``httpx`` clients wired to it, and automatic reset of the global output
manager.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from sparkmail.output import OutputManager, reset_output, set_output


class ScriptedHandler:
    """``httpx.MockTransport`` handler returning *statuses* in order.

    Once the script runs out the last status repeats. Every request is
    appended to :attr:`requests`.
    """

    def __init__(self, statuses: list[int], body: Any = None) -> None:
        self.statuses = list(statuses) or [200]
        self.body = {"results": {"id": "42"}} if body is None else body
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.statuses[min(self.calls, len(self.statuses)) - 1]
        return httpx.Response(
            status,
            content=json.dumps(self.body).encode(),
            headers={"content-type": "application/json", "x-attempt": str(self.calls)},
        )


@pytest.fixture(autouse=True)
def _quiet_output():
    """Install a quiet, colourless output manager for every test."""
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


@pytest.fixture
def scripted() -> Callable[..., ScriptedHandler]:
    """Factory: ``scripted(503, 200)`` answers 503 first, then 200."""

    def _make(*statuses: int, body: Any = None) -> ScriptedHandler:
        return ScriptedHandler(list(statuses), body=body)

    return _make


@pytest.fixture
def sync_client() -> Callable[[Callable], httpx.Client]:
    """Factory for an ``httpx.Client`` backed by a mock handler."""
    clients: list[httpx.Client] = []

    def _make(handler: Callable) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def async_client() -> Callable[[Callable], httpx.AsyncClient]:
    """Factory for an ``httpx.AsyncClient`` backed by a mock handler."""

    def _make(handler: Callable) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make
