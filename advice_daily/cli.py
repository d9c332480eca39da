"""Command-line interface for the advice_daily application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import pprint
from pathlib import Path
from typing import List, Optional

from .config import parse_app_config
from .runner import RunConfig, build_screen, execute, run_interactive

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Show the advice of the day, fetching a new slip when needed."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the configuration XML file. Built-in defaults when omitted.",
    )
    parser.add_argument(
        "--endpoint",
        default=None,
        help="Advice endpoint URL. Overrides config.",
    )
    parser.add_argument(
        "--database",
        default=None,
        help="SQLAlchemy connection string for the local cache. Overrides config.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore today's cached advice and fetch a new one.",
    )
    parser.add_argument(
        "--copy",
        action="store_true",
        help="Copy the advice to the clipboard after showing it.",
    )
    parser.add_argument(
        "--show-cache",
        action="store_true",
        help="Print the stored advice of the day and exit.",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Keep the screen open with refresh and copy commands.",
    )
    return parser


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Third-party loggers that only add noise below WARNING.
QUIET_LOGGERS = ("urllib3", "sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Route advice_daily logs to the console and, optionally, a file."""
    log_level = logging.getLevelName(level_name.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logger.debug(
        "Logging at %s to %s",
        level_name.upper(),
        log_file or "the console only",
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config)

        # CLI overrides config
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file
        configure_logging(log_level, log_file)

        config = RunConfig(
            database_connection_string=args.database
            or app_config.database.connection_string,
            endpoint=args.endpoint or app_config.endpoint,
            timeout=app_config.timeout,
            refresh=args.refresh,
            copy=args.copy,
            show_cache=args.show_cache,
        )
        logger.debug(
            "Active Configuration:\n%s", pprint.pformat(dataclasses.asdict(config))
        )

        if args.interactive:
            run_interactive(build_screen(config))
            return 0

        result = execute(config)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    print(result.output_text)
    if args.show_cache:
        return 0
    return 0 if result.advice is not None else 1
