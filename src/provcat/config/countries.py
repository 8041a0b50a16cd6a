"""External country feed configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_COUNTRIES_API_URL = (
    "https://restcountries.com/v3.1/all?fields=flags,name,cca3,translations"
)
COUNTRIES_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True, slots=True)
class CountriesFeedConfig:
    """Where the country catalog is fetched from and how the client behaves."""

    url: str
    resilience: ResilienceConfig


def get_countries_feed_config(
    *,
    resilience: ResilienceConfig | None = None,
) -> CountriesFeedConfig:
    url = optional_env_var("COUNTRIES_API_URL", DEFAULT_COUNTRIES_API_URL)
    return CountriesFeedConfig(
        url=url,
        resilience=resilience
        or ResilienceConfig(
            name="restcountries",
            timeout_seconds=COUNTRIES_TIMEOUT_SECONDS,
            retry=RetryPolicy(attempts=3),
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache_ttl_seconds=3600.0,
            headers={"Accept": "application/json"},
        ),
    )
