"""Public interface for the REST Countries adapter."""

from __future__ import annotations

from .client import RestCountriesAPIError, RestCountriesFeed
from .schema import CountryPayload
from .translator import parse_country_record

__all__ = [
    "CountryPayload",
    "RestCountriesAPIError",
    "RestCountriesFeed",
    "parse_country_record",
]
