"""Pydantic models for JSON payloads read by the CLI."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from provcat.domain.dto import CountryDto, CustomFieldDto, ProviderDto, ServiceDto


def _absent_id_to_zero(value: object) -> object:
    return 0 if value is None else value


def _none_to_blank(value: object) -> object:
    return "" if value is None else value


class PayloadBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CountryPayload(PayloadBaseModel):
    id: int = 0
    iso_code: str = ""
    name: str = ""
    flag_image: str = ""

    _normalize_id = field_validator("id", mode="before")(_absent_id_to_zero)
    _normalize_text = field_validator("iso_code", "name", "flag_image", mode="before")(
        _none_to_blank
    )

    def to_dto(self) -> CountryDto:
        return CountryDto(
            id=self.id, iso_code=self.iso_code, name=self.name, flag_image=self.flag_image
        )


class CustomFieldPayload(PayloadBaseModel):
    id: int = 0
    field_name: str = ""
    field_value: str = ""

    _normalize_id = field_validator("id", mode="before")(_absent_id_to_zero)
    _normalize_text = field_validator("field_name", "field_value", mode="before")(_none_to_blank)

    def to_dto(self) -> CustomFieldDto:
        return CustomFieldDto(id=self.id, field_name=self.field_name, field_value=self.field_value)


class ServicePayload(PayloadBaseModel):
    id: int = 0
    name: str = ""
    value_per_hour_usd: str = ""
    countries: list[CountryPayload] = Field(default_factory=list)

    _normalize_id = field_validator("id", mode="before")(_absent_id_to_zero)
    _normalize_text = field_validator("name", "value_per_hour_usd", mode="before")(_none_to_blank)

    def to_dto(self) -> ServiceDto:
        return ServiceDto(
            id=self.id,
            name=self.name,
            value_per_hour_usd=self.value_per_hour_usd,
            countries=[country.to_dto() for country in self.countries],
        )


class ProviderPayload(PayloadBaseModel):
    id: int = 0
    nit: str = ""
    name: str = ""
    email: str = ""
    custom_fields: list[CustomFieldPayload] = Field(default_factory=list)
    services: list[ServicePayload] = Field(default_factory=list)

    _normalize_id = field_validator("id", mode="before")(_absent_id_to_zero)
    _normalize_text = field_validator("nit", "name", "email", mode="before")(_none_to_blank)

    def to_dto(self) -> ProviderDto:
        return ProviderDto(
            id=self.id,
            nit=self.nit,
            name=self.name,
            email=self.email,
            custom_fields=[field.to_dto() for field in self.custom_fields],
            services=[service.to_dto() for service in self.services],
        )
