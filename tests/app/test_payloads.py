from __future__ import annotations

import pytest
from pydantic import ValidationError

from provcat.domain.dto import CountryDto, CustomFieldDto, ProviderDto, ServiceDto
from provcat.ui.payloads import ProviderPayload, ServicePayload


def test_null_ids_are_treated_as_new_children() -> None:
    payload = ProviderPayload.model_validate_json(
        """
        {
          "id": null,
          "nit": "900-1",
          "name": "Acme",
          "email": null,
          "custom_fields": [{"id": null, "field_name": "sector", "field_value": "retail"}],
          "services": [
            {"id": null, "name": "Audit", "value_per_hour_usd": "80",
             "countries": [{"id": 7, "iso_code": "COL"}]}
          ]
        }
        """
    )

    assert payload.to_dto() == ProviderDto(
        id=0,
        nit="900-1",
        name="Acme",
        email="",
        custom_fields=[CustomFieldDto(id=0, field_name="sector", field_value="retail")],
        services=[
            ServiceDto(
                id=0,
                name="Audit",
                value_per_hour_usd="80",
                countries=[CountryDto(id=7, iso_code="COL")],
            )
        ],
    )


def test_missing_fields_fall_back_to_defaults() -> None:
    assert ServicePayload.model_validate({"name": "Audit"}).to_dto() == ServiceDto(name="Audit")


def test_unknown_keys_are_ignored() -> None:
    dto = ServicePayload.model_validate({"id": 3, "name": "Audit", "legacy": True}).to_dto()

    assert dto.id == 3


def test_non_numeric_id_is_rejected() -> None:
    with pytest.raises(ValidationError):
        ServicePayload.model_validate({"id": "three"})
