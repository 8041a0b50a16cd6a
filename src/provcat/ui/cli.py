# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from provcat.app import close, ensure_started, provider_writer, service_writer, sync_countries
from provcat.config import ConfigurationError, configure_logging
from provcat.domain.dto import (
    ProviderDto,
    ProviderSummary,
    ServiceByProvider,
    ServicesByCountry,
)
from provcat.domain.errors import OperationFailedError
from provcat.ui.payloads import ProviderPayload, ServicePayload

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from provcat.domain.model import OperationResult

log = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the provider and service catalog")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync-countries", help="Synchronise countries from the external feed")

    providers = subparsers.add_parser("providers", help="Provider commands")
    provider_sub = providers.add_subparsers(dest="action", required=True)
    provider_sub.add_parser("list", help="List providers without children")
    provider_sub.add_parser("complete", help="List providers with fields, services and countries")
    for action in ("create", "update"):
        command = provider_sub.add_parser(action, help=f"{action.capitalize()} a provider")
        _add_payload_argument(command)
    provider_delete = provider_sub.add_parser("delete", help="Delete a provider")
    provider_delete.add_argument("id", type=int, help="Provider id")

    services = subparsers.add_parser("services", help="Service commands")
    service_sub = services.add_subparsers(dest="action", required=True)
    for action in ("create", "update"):
        command = service_sub.add_parser(action, help=f"{action.capitalize()} a service")
        _add_payload_argument(command)
    service_delete = service_sub.add_parser("delete", help="Delete a service")
    service_delete.add_argument("id", type=int, help="Service id")
    by_provider = service_sub.add_parser(
        "by-provider",
        help="Services offered by providers whose name contains the given text",
    )
    by_provider.add_argument("name", type=str)
    by_country = service_sub.add_parser(
        "by-country",
        help="Services available in the country with the given ISO code",
    )
    by_country.add_argument("iso_code", type=str)

    return parser.parse_args(list(argv))


def _add_payload_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--file",
        "-f",
        type=Path,
        help="JSON payload file, stdin when omitted; a missing or null id marks a new row",
    )


def _read_payload[T: (ProviderPayload, ServicePayload)](
    args: argparse.Namespace, payload_type: type[T]
) -> T:
    raw = args.file.read_text(encoding="utf-8") if args.file else sys.stdin.read()
    try:
        return payload_type.model_validate_json(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid {payload_type.__name__} payload: {exc}") from exc


def _emit(value: object, annotation: Any) -> None:
    print(TypeAdapter(annotation).dump_json(value, indent=2).decode())


def _report(result: OperationResult) -> int:
    print(result.message)
    return 0 if result.succeeded else EXIT_NOT_FOUND


async def _run_providers(args: argparse.Namespace) -> int:
    writer = provider_writer()
    if args.action == "list":
        _emit(await writer.list_providers(), list[ProviderSummary])
        return 0
    if args.action == "complete":
        _emit(await writer.list_complete(), list[ProviderDto])
        return 0
    if args.action == "create":
        return _report(await writer.create(_read_payload(args, ProviderPayload).to_dto()))
    if args.action == "update":
        return _report(await writer.update(_read_payload(args, ProviderPayload).to_dto()))
    return _report(await writer.delete(args.id))


async def _run_services(args: argparse.Namespace) -> int:
    writer = service_writer()
    if args.action == "by-provider":
        _emit(await writer.services_by_provider_name(args.name), list[ServiceByProvider])
        return 0
    if args.action == "by-country":
        _emit(await writer.services_by_country(args.iso_code), list[ServicesByCountry])
        return 0
    if args.action == "create":
        return _report(await writer.create(_read_payload(args, ServicePayload).to_dto()))
    if args.action == "update":
        return _report(await writer.update(_read_payload(args, ServicePayload).to_dto()))
    return _report(await writer.delete(args.id))


async def _run(args: argparse.Namespace) -> int:
    await ensure_started()
    try:
        if args.command == "sync-countries":
            await sync_countries()
            return 0
        if args.command == "providers":
            return await _run_providers(args)
        if args.command == "services":
            return await _run_services(args)
        raise ValueError(f"Unsupported command: {args.command}")
    finally:
        await close()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)

    try:
        code = asyncio.run(_run(parsed_args))
    except (ValueError, OSError, ConfigurationError) as exc:
        log.error(f"CLI validation error: {exc}")  # noqa: TRY400
        sys.exit(EXIT_USAGE)
    except OperationFailedError as exc:
        log.error(f"{exc.operation} aborted: {exc.cause!r}")  # noqa: TRY400
        sys.exit(EXIT_FAILURE)
    except Exception:
        log.exception("Fatal error while running command")
        sys.exit(EXIT_FAILURE)
    if code:
        sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
