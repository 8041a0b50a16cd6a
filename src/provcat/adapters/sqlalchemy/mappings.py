"""SQLAlchemy mapping metadata for the catalog domain model."""

from __future__ import annotations

import logging
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, Integer, String, Table, event, orm
from sqlalchemy.orm import configure_mappers

from provcat.domain.model import (
    Country,
    CustomField,
    Provider,
    ProviderService,
    Service,
    ServiceCountry,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.ext.asyncio import AsyncEngine

log = logging.getLogger(__name__)

mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

provider_table = Table(
    "provider",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("nit", String(50), nullable=False),
    Column("name", String(100), nullable=False, index=True),
    Column("email", String(100), nullable=False),
)

custom_field_table = Table(
    "custom_field",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("provider_id", Integer, ForeignKey("provider.id"), nullable=False, index=True),
    Column("field_name", String, nullable=False),
    Column("field_value", String, nullable=False),
)

service_table = Table(
    "service",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("value_per_hour_usd", String, nullable=False),
)

country_table = Table(
    "country",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("iso_code", String(10), nullable=False, unique=True),
    Column("name", String, nullable=False),
    Column("flag_image", String, nullable=False, default=""),
)

provider_service_table = Table(
    "provider_service",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("provider_id", Integer, ForeignKey("provider.id"), nullable=False, index=True),
    Column("service_id", Integer, ForeignKey("service.id"), nullable=False, index=True),
)

service_country_table = Table(
    "service_country",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("service_id", Integer, ForeignKey("service.id"), nullable=False, index=True),
    Column("country_id", Integer, ForeignKey("country.id"), nullable=False, index=True),
)


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses onto their tables.

    No relationships are declared: writers sequence parent and child rows
    themselves through explicit flushes.
    """

    log.info("Starting SQLAlchemy mappers")
    mapper_registry.map_imperatively(Provider, provider_table)
    mapper_registry.map_imperatively(CustomField, custom_field_table)
    mapper_registry.map_imperatively(Service, service_table)
    mapper_registry.map_imperatively(Country, country_table)
    mapper_registry.map_imperatively(ProviderService, provider_service_table)
    mapper_registry.map_imperatively(ServiceCountry, service_country_table)
    configure_mappers()
    return mapper_registry


def enforce_sqlite_foreign_keys(engine: AsyncEngine | Engine) -> None:
    """Turn on SQLite foreign key checks for every new connection of ``engine``."""

    sync_engine = getattr(engine, "sync_engine", engine)
    if sync_engine.dialect.name != "sqlite":
        return

    @event.listens_for(sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    async with engine.begin() as connection:
        await connection.run_sync(mapper_registry.metadata.create_all)
