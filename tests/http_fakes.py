from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Self

import aiohttp
from yarl import URL

from core.http.transport import TransportResponse

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType


@dataclass
class FakeResponse:
    status: int = 200
    json_data: Any = None
    text_data: str = ""
    content: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)
    method: str = "GET"
    url: str = "http://test"

    def __post_init__(self) -> None:
        self.request_info = aiohttp.RequestInfo(
            url=URL(self.url),
            method=self.method,
            headers={},
            real_url=URL(self.url),
        )
        self.history = ()

    async def json(self) -> Any:
        return self.json_data

    async def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        if self.content is not None:
            return self.content.decode(encoding, errors)
        return self.text_data

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        return False


class FakeSession:
    def __init__(
        self,
        *,
        get_responses: list[FakeResponse | Exception] | None = None,
        responses: list[FakeResponse | Exception] | None = None,
    ) -> None:
        self._get_responses = list(get_responses or [])
        self._responses = list(responses or [])
        self.requests: list[tuple[str, str, dict[str, Any]]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append(("GET", url, kwargs))
        return self._next(self._get_responses)

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append((method, url, kwargs))
        return self._next(self._responses)

    @staticmethod
    def _next(queue: list[FakeResponse | Exception]) -> FakeResponse:
        if not queue:
            msg = "No fake responses available"
            raise AssertionError(msg)
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeTransport:
    """Scripted transport: one outcome per call, recorded in ``calls``."""

    def __init__(self, outcomes: Sequence[int | Exception] = ()) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[tuple[str, str, dict[str, str] | None, str | None]] = []

    async def send(
        self,
        url: str,
        method: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> TransportResponse:
        self.calls.append((url, method, headers, body))
        if not self._outcomes:
            msg = f"Unexpected request {method} {url}"
            raise AssertionError(msg)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return TransportResponse(status=outcome, body="{}")

