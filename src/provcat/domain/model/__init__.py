"""Public domain model surface."""

from __future__ import annotations

from provcat.domain.model.entities import (
    Country,
    CustomField,
    Entity,
    Provider,
    ProviderService,
    Service,
    ServiceCountry,
)
from provcat.domain.model.results import (
    OK_MESSAGE,
    PROVIDER_NOT_FOUND_MESSAGE,
    SERVICE_NOT_FOUND_MESSAGE,
    OperationResult,
    OperationStatus,
)

__all__ = [
    "OK_MESSAGE",
    "PROVIDER_NOT_FOUND_MESSAGE",
    "SERVICE_NOT_FOUND_MESSAGE",
    "Country",
    "CustomField",
    "Entity",
    "OperationResult",
    "OperationStatus",
    "Provider",
    "ProviderService",
    "Service",
    "ServiceCountry",
]
