"""SQLAlchemy adapter package for provcat."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCountryRepository,
    SqlAlchemyCustomFieldRepository,
    SqlAlchemyProviderRepository,
    SqlAlchemyProviderServiceRepository,
    SqlAlchemyServiceCountryRepository,
    SqlAlchemyServiceRepository,
)
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyCountryRepository",
    "SqlAlchemyCustomFieldRepository",
    "SqlAlchemyProviderRepository",
    "SqlAlchemyProviderServiceRepository",
    "SqlAlchemyServiceCountryRepository",
    "SqlAlchemyServiceRepository",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
