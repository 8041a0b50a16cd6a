from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from provcat.domain.countries import SyncCountriesResult
from provcat.ui import cli

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def database(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    path = tmp_path / "cli.db"
    monkeypatch.setenv("DATABASE_URI", f"sqlite+aiosqlite:///{path}")
    return path


def _write_payload(tmp_path: Path, name: str, payload: object) -> Path:
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_provider_create_then_list(
    database: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    payload = _write_payload(
        tmp_path,
        "provider.json",
        {
            "nit": "900-1",
            "name": "Acme",
            "email": "contact@acme.test",
            "custom_fields": [{"field_name": "sector", "field_value": "retail"}],
            "services": [{"name": "Audit", "value_per_hour_usd": "80"}],
        },
    )

    cli.main(["providers", "create", "--file", str(payload)])
    assert capsys.readouterr().out.strip() == "OK"

    cli.main(["providers", "complete"])
    (provider,) = json.loads(capsys.readouterr().out)

    assert database.exists()
    assert provider["name"] == "Acme"
    assert provider["custom_fields"][0]["field_name"] == "sector"
    assert provider["services"][0]["name"] == "Audit"


def test_delete_missing_provider_exits_with_not_found(
    database: Path,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["providers", "delete", "41"])

    assert excinfo.value.code == cli.EXIT_NOT_FOUND
    assert capsys.readouterr().out.strip() == "Provider not found"


def test_invalid_payload_exits_with_usage_error(database: Path, tmp_path: Path) -> None:  # noqa: ARG001
    payload = _write_payload(tmp_path, "service.json", {"name": ["not", "a", "string"]})

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["services", "create", "--file", str(payload)])

    assert excinfo.value.code == cli.EXIT_USAGE


def test_services_by_country_prints_empty_list(
    database: Path,  # noqa: ARG001
    capsys: pytest.CaptureFixture[str],
) -> None:
    cli.main(["services", "by-country", "XX"])

    assert json.loads(capsys.readouterr().out) == []


def test_sync_countries_command(database: Path, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ARG001
    calls: list[str] = []

    async def fake_sync() -> SyncCountriesResult:
        calls.append("sync")
        return SyncCountriesResult(fetched=1, created=1)

    monkeypatch.setattr(cli, "sync_countries", fake_sync)

    cli.main(["sync-countries"])

    assert calls == ["sync"]


def test_unknown_command_is_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["export"])

    assert excinfo.value.code == 2


def test_provider_create_accepts_null_ids(
    database: Path,  # noqa: ARG001
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    payload = _write_payload(
        tmp_path,
        "provider.json",
        {
            "id": None,
            "nit": "900-2",
            "name": "Nullco",
            "email": "hi@nullco.test",
            "custom_fields": [{"id": None, "field_name": "tier", "field_value": "gold"}],
            "services": [],
        },
    )

    cli.main(["providers", "create", "--file", str(payload)])

    assert capsys.readouterr().out.strip() == "OK"
    cli.main(["providers", "list"])
    (provider,) = json.loads(capsys.readouterr().out)
    assert provider["name"] == "Nullco"
    assert provider["id"] > 0
