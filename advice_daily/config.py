"""Configuration loading for advice_daily."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from .db import default_connection_string, is_memory_sqlite
from .fetcher import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class DatabaseConfig:
    connection_string: str = field(default_factory=default_connection_string)


@dataclass
class AppConfig:
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def _resolve_connection_string(base_path: Path, value: str) -> str:
    """Resolve relative SQLite file paths against the config file location."""
    prefix = "sqlite:///"
    if not value.startswith(prefix) or is_memory_sqlite(value):
        return value
    return prefix + _resolve_path(base_path, value[len(prefix) :])


def parse_app_config(path: Optional[str]) -> AppConfig:
    """Parse the application configuration XML; defaults when no path is given."""
    if not path:
        logger.debug("No configuration file given; using defaults")
        return AppConfig()

    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    try:
        root = ET.parse(config_path).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Config file is not valid XML: {path}: {exc}") from exc

    endpoint = (root.findtext("endpoint") or "").strip() or DEFAULT_ENDPOINT
    if not endpoint.startswith(("http://", "https://")):
        raise ValueError(f"Endpoint must be an http(s) URL: {endpoint}")

    timeout_text = root.findtext("timeout")
    try:
        timeout = float(timeout_text) if timeout_text else DEFAULT_TIMEOUT
    except ValueError as exc:
        raise ValueError(f"Invalid <timeout> value: {timeout_text}") from exc
    if timeout <= 0:
        raise ValueError("<timeout> must be positive.")

    # Database
    db_config = DatabaseConfig()
    db_node = root.find("database")
    if db_node is not None:
        conn = (db_node.findtext("connection-string") or "").strip()
        if conn:
            db_config.connection_string = _resolve_connection_string(
                config_path, conn
            )

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        endpoint=endpoint,
        timeout=timeout,
        database=db_config,
        logging=logging_config,
    )
