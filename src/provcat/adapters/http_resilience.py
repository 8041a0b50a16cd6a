"""httpx client with retries, rate limiting and an optional in-memory response cache."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from provcat.config.http_resilience import RETRYABLE_ERRORS

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import HeaderTypes, QueryParamTypes, TimeoutTypes, URLTypes

    from provcat.config.http_resilience import ResilienceConfig, RetryPolicy

log = getLogger(__name__)


class RequestOptions(TypedDict, total=False):
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault


class AsyncClientOptions(TypedDict, total=False):
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.attempts,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        allowed_methods=("GET",),
        status_forcelist=tuple(sorted(policy.retry_statuses)),
        retry_on_exceptions=RETRYABLE_ERRORS,
    )


class ResilientClient:
    """Throttled, retrying GET client; use it as an async context manager."""

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        client_kwargs: AsyncClientOptions = {
            "timeout": config.timeout_seconds,
            "transport": RetryTransport(retry=build_retry(config.retry)),
        }
        if config.headers:
            client_kwargs["headers"] = dict(config.headers)

        if config.cache_ttl_seconds is None:
            self._client: httpx.AsyncClient = httpx.AsyncClient(**client_kwargs)
        else:
            storage = AsyncSqliteStorage(
                database_path=":memory:",
                default_ttl=config.cache_ttl_seconds,
                refresh_ttl_on_access=True,
            )
            self._client = AsyncCacheClient(**client_kwargs, storage=storage)
        log.debug(
            f"HTTP client {config.name!r} ready "
            f"(cache={'off' if config.cache_ttl_seconds is None else 'memory'})"
        )

    @property
    def is_cached(self) -> bool:
        return isinstance(self._client, AsyncCacheClient)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: URLTypes, **kwargs: Unpack[RequestOptions]) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, **kwargs)
        async with self._limiter:
            return await self._client.get(url, **kwargs)
