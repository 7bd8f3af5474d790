"""Shared fakes for the aiohttp session and for sleeping."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlparse

import pytest
from multidict import CIMultiDict

from ofsc.core.models import Credentials


class FakeResponse:
    """Stands in for aiohttp.ClientResponse inside ``async with``."""

    def __init__(
        self,
        status: int = 200,
        json_body: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.status = status
        self.headers = CIMultiDict(headers or {})
        if text is None:
            text = json.dumps(json_body) if json_body is not None else ""
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class RecordedCall:
    method: str
    url: str
    kwargs: dict[str, Any]

    @property
    def bearer(self) -> str:
        return self.kwargs["headers"]["Authorization"].removeprefix("Bearer ")

    @property
    def query(self) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(urlparse(self.url).query).items()}


Handler = Callable[[RecordedCall], FakeResponse]


@dataclass
class FakeSession:
    """
    Replays responses for ``request`` and ``post``.

    ``responses`` is either a list consumed in order or a handler called
    with every RecordedCall.
    """

    responses: list[FakeResponse] | Handler = field(default_factory=list)
    calls: list[RecordedCall] = field(default_factory=list)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        call = RecordedCall(method, url, kwargs)
        self.calls.append(call)
        if callable(self.responses):
            return self.responses(call)
        return self.responses.pop(0)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("POST", url, **kwargs)

    def calls_to(self, method: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.method == method]


class SleepRecorder:
    """Async sleep replacement that only records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeTokenProvider:
    """Hands out token-1, token-2, ... and counts the calls."""

    def __init__(self) -> None:
        self.calls = 0

    async def acquire_token(self, credentials: Credentials) -> str:
        self.calls += 1
        return f"token-{self.calls}"


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(client_id="client", client_secret="secret", instance_url="acme")


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def token_provider() -> FakeTokenProvider:
    return FakeTokenProvider()
