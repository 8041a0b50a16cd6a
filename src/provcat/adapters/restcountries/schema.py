"""Pydantic models describing the REST Countries payload."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


def _none_to_blank(value: object) -> object:
    return "" if value is None else value


class RestCountriesBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class FlagsPayload(RestCountriesBaseModel):
    png: str = ""

    _normalize_png = field_validator("png", mode="before")(_none_to_blank)


class NamePayload(RestCountriesBaseModel):
    common: str = ""

    _normalize_common = field_validator("common", mode="before")(_none_to_blank)


class TranslationsPayload(RestCountriesBaseModel):
    spa: NamePayload | None = None


class CountryPayload(RestCountriesBaseModel):
    flags: FlagsPayload | None = None
    name: NamePayload | None = None
    cca3: str = ""
    translations: TranslationsPayload | None = None

    _normalize_cca3 = field_validator("cca3", mode="before")(_none_to_blank)

    @property
    def spanish_name(self) -> str:
        if self.translations is None or self.translations.spa is None:
            return ""
        return self.translations.spa.common
