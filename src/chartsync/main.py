#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from chartsync.app import sync_chart_sources
from chartsync.config import (
    ConfigurationError,
    configure_logging,
    get_database_config,
    get_sync_config,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Mirror chart versions from chart repositories and OCI registries into the "
            "database. Configured through environment variables."
        )
    )
    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    _parse_args(sys.argv[1:] if argv is None else argv)
    load_dotenv()
    signal(SIGINT, sigint_handler)

    try:
        configure_logging()
        config = get_sync_config()
        get_database_config()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)

    try:
        sync_chart_sources(config)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    main()
