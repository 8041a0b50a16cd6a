"""Catalog entities.

Plain dataclasses mapped imperatively by the SQLAlchemy adapter. Every entity
carries an integer surrogate ``id`` that stays ``None`` until the store has
flushed the row; foreign keys are plain integer attributes so that writers can
sequence parent and child inserts explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class Entity:
    id: int | None = None

    def require_id(self) -> int:
        """Return the generated id, failing loudly if the row was never flushed."""
        if self.id is None:
            raise RuntimeError(f"{type(self).__name__} has no id yet; flush it first")
        return self.id


@dataclass(eq=False, kw_only=True)
class Provider(Entity):
    nit: str
    name: str
    email: str


@dataclass(eq=False, kw_only=True)
class CustomField(Entity):
    provider_id: int
    field_name: str
    field_value: str


@dataclass(eq=False, kw_only=True)
class Service(Entity):
    name: str
    # stored as text by the upstream schema; never coerced to a number here
    value_per_hour_usd: str


@dataclass(eq=False, kw_only=True)
class Country(Entity):
    iso_code: str
    name: str
    flag_image: str = ""


@dataclass(eq=False, kw_only=True)
class ProviderService(Entity):
    provider_id: int
    service_id: int


@dataclass(eq=False, kw_only=True)
class ServiceCountry(Entity):
    service_id: int
    country_id: int
