#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from dotenv import load_dotenv

from geokeeper.app import (
    validate_and_apply_cache_edit,
    validate_and_edit_log,
    validate_and_publish_log,
    verify_cache_statistics,
)
from geokeeper.config import ConfigurationError, configure_logging
from geokeeper.domain.errors import GeokeeperError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


def _uuid(value: str) -> UUID:
    try:
        return UUID(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a valid UUID: {value}") from exc


def _field_assignment(value: str) -> tuple[str, str]:
    name, sep, raw = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected FIELD=VALUE, got {value!r}")
    return name.strip(), raw


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geokeeper",
        description="Validate and apply geocache edits and log entries",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    edit_cache = commands.add_parser("edit-cache", help="Apply a partial edit to a cache")
    edit_cache.add_argument("cache_code")
    edit_cache.add_argument("--actor", type=_uuid, required=True, help="Editing user id")
    edit_cache.add_argument(
        "--set",
        dest="fields",
        type=_field_assignment,
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Field to change; may be repeated",
    )
    edit_cache.add_argument(
        "--langpref",
        default="en",
        help="Pipe-separated language preference list (default: %(default)s)",
    )

    publish = commands.add_parser("publish-log", help="Publish a new log entry")
    publish.add_argument("cache_code")
    publish.add_argument("--actor", type=_uuid, required=True, help="Logging user id")
    publish.add_argument("--type", dest="logtype", required=True, help='e.g. "Found it"')
    publish.add_argument("--when", required=True, help="ISO-8601 timestamp of the visit")
    publish.add_argument("--comment", default="")
    publish.add_argument("--format", dest="comment_format", choices=("plaintext", "auto", "html"))
    publish.add_argument("--password")
    publish.add_argument("--recommend", action="store_true")
    publish.add_argument("--rating", type=int)

    edit_log = commands.add_parser("edit-log", help="Edit an existing log entry")
    edit_log.add_argument("log_id", type=_uuid)
    edit_log.add_argument("--actor", type=_uuid, required=True, help="Author of the log")
    edit_log.add_argument("--type", dest="logtype")
    edit_log.add_argument("--when")
    edit_log.add_argument("--comment")
    edit_log.add_argument("--format", dest="comment_format", choices=("plaintext", "auto", "html"))
    edit_log.add_argument("--password")

    verify = commands.add_parser(
        "verify-stats", help="Check cache counters against the log history"
    )
    verify.add_argument("cache_code")
    return parser


def _log_changes(args: argparse.Namespace) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for key in ("logtype", "when", "comment", "comment_format", "password"):
        value = getattr(args, key)
        if value is not None:
            changes[key] = value
    return changes


def _dispatch(args: argparse.Namespace) -> Any:
    if args.command == "edit-cache":
        return validate_and_apply_cache_edit(
            args.cache_code,
            args.actor,
            dict(args.fields),
            langprefs=[part for part in args.langpref.split("|") if part],
        )
    if args.command == "publish-log":
        return validate_and_publish_log(
            args.cache_code,
            args.actor,
            args.logtype,
            args.when,
            args.comment,
            args.comment_format,
            args.password,
            recommend=args.recommend,
            rating=args.rating,
        )
    if args.command == "edit-log":
        return validate_and_edit_log(args.log_id, args.actor, _log_changes(args))
    return verify_cache_statistics(args.cache_code)


def main(argv: Sequence[str] | None = None) -> int:
    """Main application entry point."""
    args = _build_parser().parse_args(list(argv) if argv is not None else sys.argv[1:])
    try:
        configure_logging(level=logging.DEBUG if args.verbose else None)
        result = _dispatch(args)
    except (GeokeeperError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(asdict(result), default=str, indent=2))
    return 0


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    sys.exit(main())


if __name__ == "__main__":
    run()
