"""Translate REST Countries payloads into catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from provcat.domain.dto import CountryRecord

if TYPE_CHECKING:
    from .schema import CountryPayload


def parse_country_record(payload: CountryPayload) -> CountryRecord:
    """Catalog names are the Spanish common name; a missing one stays blank."""

    return CountryRecord(
        iso_code=payload.cca3.strip(),
        name=payload.spanish_name.strip(),
        flag_image=payload.flags.png if payload.flags is not None else "",
    )
