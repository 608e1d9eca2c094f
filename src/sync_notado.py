"""Command line entry point for syncing Kobo highlights to Notado."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Iterable

from kobo_notado.config import SyncConfig, load_config
from kobo_notado.kobo import KoboDatabase, KoboDatabaseError
from kobo_notado.sync import SyncError, run_sync
from kobo_notado.timestamps import TimestampParseError
from kobo_notado.uploaders import NotadoClient, NotadoError

TOKEN_ENV_VAR = "NOTADO_TOKEN"


def _parse_args(argv: Iterable[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, help="Path to JSON configuration file", default=None)
    parser.add_argument(
        "--kobo",
        type=Path,
        help="Mount point of the Kobo or path to a KoboReader.sqlite file",
        default=None,
    )
    parser.add_argument("--token", help=f"Notado API token (defaults to ${TOKEN_ENV_VAR})", default=None)
    parser.add_argument(
        "--include-store",
        action="store_true",
        help="Also upload highlights from store-bought books",
    )
    parser.add_argument("--endpoint", help="Notado GraphQL endpoint", default=None)
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds", default=None)
    parser.add_argument("--dry-run", action="store_true", help="Build highlights without uploading")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _combine_config(args: argparse.Namespace) -> SyncConfig:
    try:
        file_config = load_config(args.config)
    except FileNotFoundError as exc:  # pragma: no cover - user error
        raise SystemExit(f"Configuration file not found: {args.config}") from exc
    except OSError as exc:  # pragma: no cover - user error
        raise SystemExit(f"Failed to read configuration file: {exc}") from exc
    config = SyncConfig.from_mapping(file_config)

    env_token = os.environ.get(TOKEN_ENV_VAR)
    if env_token:
        config.notado_token = env_token
    if args.token is not None:
        config.notado_token = args.token
    if args.kobo is not None:
        config.kobo_path = args.kobo
    if args.include_store:
        config.upload_store_highlights = True
    if args.endpoint is not None:
        config.endpoint = args.endpoint
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.dry_run:
        config.dry_run = True
    return config


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else list(argv))
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("kobo_notado")
    config = _combine_config(args)

    if config.kobo_path is None:
        print("No Kobo location given. Pass --kobo or set kobo_path in the config file.", file=sys.stderr)
        return 1

    client = NotadoClient(endpoint=config.endpoint, timeout=config.timeout, logger=logger)
    # The database is opened on first query, after the token has been checked.
    database = KoboDatabase(config.kobo_path, logger=logger)
    try:
        result = run_sync(config, database, client, logger=logger)
    except (SyncError, KoboDatabaseError, TimestampParseError, NotadoError) as exc:
        print(f"Sync failed: {exc}", file=sys.stderr)
        return 1
    finally:
        database.close()

    if result.dry_run:
        print(
            f"[DRY-RUN] Would upload {result.highlights} highlight(s) in {result.batches} batch(es)."
        )
    else:
        print(f"Sync complete: {result.uploaded} highlight(s) uploaded to Notado.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
