"""Shared test fixtures for the onesky test suite.

WHY: Almost every client test needs the same thing: an OneSkyClient wired
to a fake OneSky server that records what was sent and answers with
canned envelopes. Centralizing it here keeps the tests about behavior.

HOW: StubServer plugs into httpx.MockTransport. Responses are queued in
order; each incoming request is recorded with its body already read.
StubServer.run() opens the client and drives a coroutine with
asyncio.run(), so tests stay plain synchronous functions.

RULES:
- No test touches the network
- Credentials are fixed: public "pub-key", secret "secret-key"; tests read
  them from the StubServer attributes
- When the queue is empty the server answers a 200 envelope with data None
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from onesky.api.client import OneSkyClient

BASE_URL = "https://onesky.test/1/"
PUBLIC_KEY = "pub-key"
SECRET_KEY = "secret-key"


def envelope(data: Any = None, status: int = 200, message: Optional[str] = None, **meta: Any) -> Dict[str, Any]:
    """Build a OneSky ``{meta, data}`` response body."""
    body_meta: Dict[str, Any] = {"status": status, **meta}
    if message is not None:
        body_meta["message"] = message
    return {"meta": body_meta, "data": data}


class StubServer:
    """A fake OneSky endpoint behind httpx.MockTransport."""

    base_url = BASE_URL
    public_key = PUBLIC_KEY
    secret_key = SECRET_KEY

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._responses: List[Any] = []

    def queue(self, response: httpx.Response) -> None:
        self._responses.append(response)

    def queue_envelope(self, data: Any = None, status: int = 200, http_status: int = 200, **kwargs: Any) -> None:
        self.queue(httpx.Response(http_status, json=envelope(data, status=status, **kwargs)))

    def queue_error(self, exc: Exception) -> None:
        self._responses.append(exc)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(200, json=envelope())
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def client(self, **kwargs: Any) -> OneSkyClient:
        kwargs.setdefault("base_url", self.base_url)
        kwargs.setdefault("transport", httpx.MockTransport(self._handle))
        return OneSkyClient(
            self.public_key,
            self.secret_key,
            **kwargs,
        )

    def run(self, fn: Callable[[OneSkyClient], Any], **kwargs: Any) -> Any:
        """Open a client and await ``fn(client)`` inside asyncio.run()."""

        async def _run():
            async with self.client(**kwargs) as client:
                return await fn(client)

        return asyncio.run(_run())


@pytest.fixture
def server() -> StubServer:
    return StubServer()


@pytest.fixture
def frozen_time(monkeypatch):
    """Pin time.time() so signatures are predictable."""
    monkeypatch.setattr("time.time", lambda: 1700000000.75)
    return "1700000000"
