"""Shared fixtures for snowtrack tests."""

from __future__ import annotations

import json
import threading
from typing import Any, Callable

import httpx
import pytest

from snowtrack.emitters.emitter import AsyncEmitter, Emitter


class CollectorRecorder:
    """httpx mock transport that records every request it answers.

    ``responder`` decides the outcome per request: return a status code, or
    raise to simulate a transport failure.
    """

    def __init__(self, responder: Callable[[httpx.Request], int] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._responder = responder or (lambda request: 200)
        self._lock = threading.Lock()

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        return httpx.Response(self._responder(request))

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def query(self, index: int = -1) -> dict[str, str]:
        return dict(self.requests[index].url.params)

    def queries(self) -> list[dict[str, str]]:
        return [dict(r.url.params) for r in self.requests]

    def body(self, index: int = -1) -> dict[str, Any]:
        return json.loads(self.requests[index].content)


def unreachable(request: httpx.Request) -> int:
    raise httpx.ConnectError("Connection refused", request=request)


class CallbackLog:
    """Collects on_success / on_failure invocations."""

    def __init__(self) -> None:
        self.successes: list[int] = []
        self.failures: list[tuple[int, list[dict[str, str]]]] = []

    def on_success(self, count: int) -> None:
        self.successes.append(count)

    def on_failure(self, count: int, failed: list[dict[str, str]]) -> None:
        self.failures.append((count, failed))


@pytest.fixture
def recorder():
    return CollectorRecorder()


@pytest.fixture
def callbacks():
    return CallbackLog()


@pytest.fixture
def make_emitter(recorder, callbacks):
    """Factory for emitters wired to the recorder and the callback log."""

    def _make(options: dict[str, Any] | None = None, *, cls=Emitter, rec=None) -> Emitter:
        opts = {"on_success": callbacks.on_success, "on_failure": callbacks.on_failure}
        opts.update(options or {})
        return cls("collector.test", opts, client=(rec or recorder).client())

    return _make


@pytest.fixture
def make_async_emitter(make_emitter):
    def _make(options: dict[str, Any] | None = None, *, rec=None) -> AsyncEmitter:
        return make_emitter(options, cls=AsyncEmitter, rec=rec)

    return _make
