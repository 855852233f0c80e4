"""Data shapes owned by the offline queue."""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_request_id(timestamp_ms: int | None = None) -> str:
    """Time-based id with a random suffix, e.g. ``lz3k9q1c4f7a2b9d1e``."""
    stamp = _to_base36(now_ms() if timestamp_ms is None else timestamp_ms)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(10))
    return f"{stamp}{suffix}"


class PendingRequest(BaseModel):
    """A write that could not be delivered and will be replayed verbatim."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    url: str
    method: str = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | None = None
    timestamp: int

    @classmethod
    def create(
        cls,
        url: str,
        method: str,
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> PendingRequest:
        timestamp = now_ms()
        return cls(
            id=generate_request_id(timestamp),
            url=url,
            method=method,
            headers=dict(headers or {}),
            body=body,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class SyncReport:
    """Result of one replay pass."""

    attempted: int = 0
    delivered: int = 0
    remaining: int = 0
