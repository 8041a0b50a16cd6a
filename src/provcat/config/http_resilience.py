"""Settings for the outbound HTTP client that reads the country feed."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

# Transport failures worth another attempt; HTTP status retries go through ``retry_statuses``.
RETRYABLE_ERRORS: tuple[type[httpx.HTTPError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """GET-only retry schedule with exponential backoff."""

    attempts: int = 3
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    retry_statuses: frozenset[int] = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """One named client: timeout, retries, throttling and an in-memory response cache.

    ``cache_ttl_seconds=None`` turns the cache off.
    """

    name: str
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache_ttl_seconds: float | None = None
    headers: Mapping[str, str] | None = None
