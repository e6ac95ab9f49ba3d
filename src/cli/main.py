"""rostercheck CLI entry points.
This module exposes commands for roster upload, lookup, and scanning.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import RosterConfig
from core.constants import DEFAULT_CODEC_TYPE
from core.errors import RosterError
from core.logging_config import configure_logging
from store.roster_sdk import RosterClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="rostercheck", description="Roster QR check CLI")
    parser.add_argument("--data-root", help="Override ROSTER_DATA_ROOT for this command")
    parser.add_argument("--log-level", help="Override ROSTER_LOG_LEVEL for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_upload_command(subparsers)
    _add_show_command(subparsers)
    _add_clear_command(subparsers)
    _add_scan_command(subparsers)
    _add_profile_command(subparsers)
    _add_status_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the rostercheck CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "scan" and bool(args.payloads) == args.stdin:
        parser.error("scan needs either PAYLOAD arguments or --stdin, not both")
    if args.log_level:
        configure_logging(args.log_level)
    try:
        client = _build_client(args.data_root)
        return asyncio.run(_run_command(client, args))
    except RosterError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1


def _build_client(data_root: str | None) -> RosterClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = RosterConfig.from_env()
    if data_root:
        config = replace(config, data_root=Path(data_root).expanduser().resolve())
    return RosterClient(config)


async def _run_command(client: RosterClient, args: argparse.Namespace) -> int:
    async with client:
        if args.command == "upload":
            return await _run_upload_command(client, args)
        if args.command == "show":
            return _run_show_command(client, args)
        if args.command == "clear":
            await client.clear()
            print("cleared")
            return 0
        if args.command == "scan":
            return _run_scan_command(client, args)
        if args.command == "profile":
            return await _run_profile_command(client, args)
        if args.command == "status":
            return _run_status_command(client)
    return 2


async def _run_upload_command(client: RosterClient, args: argparse.Namespace) -> int:
    """Handle upload command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    result = await client.upload(Path(args.source))
    report = result.report
    print(f"records={report.valid_rows}")
    print(f"dropped_rows={report.dropped_rows}")
    print(f"duplicate_qr_count={report.duplicate_qr_count}")
    for warning in report.warnings:
        print(f"warning: {warning}")
    return 0


def _run_show_command(client: RosterClient, args: argparse.Namespace) -> int:
    dataset = client.dataset()
    print(f"file_name={dataset.source_file_name or '-'}")
    records = dataset.records if args.limit is None else dataset.records[: args.limit]
    for record in records:
        print(f"{record.id}\t{record.random}\t{record.name}\t{record.qr_content}")
    return 0


def _run_scan_command(client: RosterClient, args: argparse.Namespace) -> int:
    """Handle scan command.

    Payloads come from the argument list, or one per line from stdin.
    Debounced repeats print ``suppressed``. Exit code is 1 when any
    admitted scan did not match.
    """
    if args.stdin:
        payloads = [line.rstrip("\r\n") for line in sys.stdin if line.strip()]
    else:
        payloads = list(args.payloads)
    all_matched = True
    for payload in payloads:
        outcome = client.scan(payload, args.codec_type)
        if outcome is None:
            print(f"{payload}\tsuppressed")
            continue
        if outcome.status != "success":
            all_matched = False
        print(f"{payload}\t{outcome.status}\t{outcome.message}")
    return 0 if all_matched else 1


async def _run_profile_command(client: RosterClient, args: argparse.Namespace) -> int:
    profile = client.profile()
    if args.user_name is not None:
        profile = await client.update_profile(args.user_name)
    print(f"user_name={profile.user_name or '-'}")
    print(f"initial={profile.initial}")
    return 0


def _run_status_command(client: RosterClient) -> int:
    dataset = client.dataset()
    status = client.storage_status()
    print(f"records={len(dataset.records)}")
    print(f"file_name={dataset.source_file_name or '-'}")
    print(f"profile_initial={client.profile().initial}")
    print(f"queue_length={status.queue_length}")
    print(f"processing={str(status.processing).lower()}")
    return 0


def _add_upload_command(subparsers: Any) -> None:
    """Register upload subcommand."""
    parser = subparsers.add_parser("upload", help="Ingest a roster CSV and replace stored data")
    parser.add_argument("source", help="Roster .csv file with Random, Name, QR Content columns")


def _add_show_command(subparsers: Any) -> None:
    """Register show subcommand."""
    parser = subparsers.add_parser("show", help="Print stored roster records")
    parser.add_argument("--limit", type=_positive_int, help="Maximum records to print")


def _positive_int(raw_value: str) -> int:
    """Parse a CLI count that must be at least one."""
    try:
        parsed_value = int(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{raw_value}'") from error
    if parsed_value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {parsed_value}")
    return parsed_value


def _add_clear_command(subparsers: Any) -> None:
    """Register clear subcommand."""
    subparsers.add_parser("clear", help="Remove the stored roster")


def _add_scan_command(subparsers: Any) -> None:
    """Register scan subcommand."""
    parser = subparsers.add_parser("scan", help="Check decoded QR payloads against the roster")
    parser.add_argument("payloads", nargs="*", help="Decoded payload strings")
    parser.add_argument("--stdin", action="store_true", help="Read one payload per line from stdin")
    parser.add_argument("--codec-type", default=DEFAULT_CODEC_TYPE, help="Reported barcode type")


def _add_profile_command(subparsers: Any) -> None:
    """Register profile subcommand."""
    parser = subparsers.add_parser("profile", help="Show or update the operator profile")
    parser.add_argument("--user-name", help="New operator name")


def _add_status_command(subparsers: Any) -> None:
    """Register status subcommand."""
    subparsers.add_parser("status", help="Show roster and storage queue status")
