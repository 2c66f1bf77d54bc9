"""
Configuration Loader (``stock_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``stock_config.schema`` dataclasses. Callers go through
``stock_config.get_active_config()`` instead of using this module directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Out-of-range values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from stock_config.schema import DatabaseConfig, LoggingConfig, StockConfig, ValidationConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_database(data: dict[str, Any]) -> DatabaseConfig:
    return DatabaseConfig(
        url=data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 10)),
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {level!r}")
    return LoggingConfig(level=level)


def parse_validation(data: dict[str, Any]) -> ValidationConfig:
    max_length = int(data.get("reference_max_length", 191))
    if not 0 < max_length <= 191:
        # the reference column is String(191)
        raise ValueError(f"reference_max_length must be between 1 and 191, got {max_length}")
    return ValidationConfig(reference_max_length=max_length)


def parse_config(data: dict[str, Any]) -> StockConfig:
    """
    Parse a ``StockConfig`` from the dict form of a YAML file.

    Raises:
        KeyError: if ``name`` or ``database.url`` is missing.
        ValueError: if a value is out of range.
    """
    return StockConfig(
        name=data["name"],
        database=parse_database(data["database"]),
        logging=parse_logging(data.get("logging") or {}),
        validation=parse_validation(data.get("validation") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
