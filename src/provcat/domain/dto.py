"""Nested request/response DTOs exchanged with callers.

An ``id`` of ``0`` (the default) marks a child the caller wants created; a
positive ``id`` references an existing row.
"""

# switch off type warnings because of default_factory=list
# pyright: reportUnknownVariableType=false

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class CountryDto:
    id: int = 0
    iso_code: str = ""
    name: str = ""
    flag_image: str = ""


@dataclass(slots=True)
class CustomFieldDto:
    id: int = 0
    field_name: str = ""
    field_value: str = ""


@dataclass(slots=True)
class ServiceDto:
    id: int = 0
    name: str = ""
    value_per_hour_usd: str = ""
    countries: list[CountryDto] = field(default_factory=list)


@dataclass(slots=True)
class ProviderDto:
    id: int = 0
    nit: str = ""
    name: str = ""
    email: str = ""
    custom_fields: list[CustomFieldDto] = field(default_factory=list)
    services: list[ServiceDto] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ProviderSummary:
    """Flat provider row without children."""

    id: int
    nit: str
    name: str
    email: str


@dataclass(slots=True, frozen=True)
class ServiceByProvider:
    provider_name: str
    provider_nit: str
    service_name: str


@dataclass(slots=True)
class ServicesByCountry:
    country_name: str
    services: list[ServiceDto] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class CountryRecord:
    """One country as delivered by the external feed, already validated."""

    iso_code: str
    name: str
    flag_image: str = ""
