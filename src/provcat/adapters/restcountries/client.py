"""HTTP client for the REST Countries API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from provcat.adapters.http_resilience import ResilientClient
from provcat.config.countries import CountriesFeedConfig, get_countries_feed_config

from .schema import CountryPayload
from .translator import parse_country_record

if TYPE_CHECKING:
    from collections.abc import Callable

    from provcat.config.http_resilience import ResilienceConfig
    from provcat.domain.dto import CountryRecord

log = getLogger(__name__)

_PAYLOAD_ADAPTER = TypeAdapter(list[CountryPayload])


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class RestCountriesAPIError(RuntimeError):
    """Raised when the REST Countries API answers with an unexpected payload."""


@dataclass(slots=True)
class RestCountriesFeed:
    config: CountriesFeedConfig = field(default_factory=get_countries_feed_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def fetch(self) -> list[CountryRecord] | None:
        """Fetch the full country list; ``None`` when the API answers with an error status."""

        async with self.client_factory(self.config.resilience) as client:
            response = await client.get(self.config.url)

        if not response.is_success:
            log.error(f"Error querying the countries API. Status code: {response.status_code}")
            return None

        try:
            payloads = _PAYLOAD_ADAPTER.validate_python(response.json())
        except (ValueError, ValidationError) as exc:
            raise RestCountriesAPIError("Unexpected REST Countries response payload") from exc

        log.info(f"Obtained {len(payloads)} countries from the API")
        return [parse_country_record(payload) for payload in payloads]


if TYPE_CHECKING:
    from provcat.domain.ports.fetching import CountryFeed

    _feed_check: CountryFeed = RestCountriesFeed()
