#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from musicat.app import ingest_artist, next_refresh_request, seed_artists
from musicat.config import configure_logging
from musicat.domain.ingest_pipeline import IngestRequest
from musicat.domain.model import canonical_artist_key

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest YouTube Music artist catalogs")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Root log level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Ingest one artist's catalog")
    ingest.add_argument(
        "--key",
        type=str,
        help="Stored artist key (defaults to the canonical key of --name)",
    )
    ingest.add_argument(
        "--browse-id",
        type=str,
        help="Artist browse ID (UC... or MPLA...) to use without searching",
    )
    ingest.add_argument(
        "--name",
        type=str,
        help="Artist name to search for when no browse ID is known",
    )
    ingest.add_argument(
        "--channel-id",
        type=str,
        help="Channel ID to bind instead of the one already stored",
    )
    ingest.add_argument(
        "--next",
        action="store_true",
        help="Refresh the artist with a bound channel that was updated longest ago",
    )

    seed = subparsers.add_parser("seed", help="Create artist rows by name")
    seed.add_argument("names", nargs="+", help="Artist names to create")

    return parser.parse_args(list(argv))


def _build_request(args: argparse.Namespace) -> IngestRequest | None:
    """Request from CLI flags; ``None`` when ``--next`` finds nothing to refresh."""

    if args.next:
        if args.key or args.browse_id or args.name or args.channel_id:
            raise ValueError("--next cannot be combined with other ingest options")
        return next_refresh_request()

    key = args.key or (canonical_artist_key(args.name) if args.name else "")
    if not key:
        raise ValueError("Provide --key, --name or --next")
    return IngestRequest(
        requested_artist_key=key,
        browse_id=args.browse_id,
        artist_name=args.name,
        channel_id=args.channel_id,
    )


def _run_ingest(args: argparse.Namespace) -> int:
    request = _build_request(args)
    if request is None:
        log.info("No artist with a bound channel to refresh")
        return 0
    result = ingest_artist(request)
    print(json.dumps(result.as_dict(), indent=2))
    return 0 if result.ok else 1


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        configure_logging(level=parsed_args.log_level)
        if parsed_args.command == "ingest":
            exit_code = _run_ingest(parsed_args)
        elif parsed_args.command == "seed":
            created = seed_artists(parsed_args.names)
            print(json.dumps({"created": created}))
            exit_code = 0
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during ingestion")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
