"""
stock_config -- single public entrypoint for stock configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``. No other component reads configuration files
    directly. The kernel MUST NEVER import from ``stock_config``; the
    functions in ``stock_config.bridges`` hand the values to it.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``KeyError`` / ``ValueError`` -- the file is incomplete or invalid.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stock_config.loader import load_yaml_file, parse_config
from stock_config.schema import StockConfig

_logger = logging.getLogger("stock_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(config_path: Path | None = None) -> StockConfig:
    """
    The ONLY public configuration entrypoint.

    Args:
        config_path: YAML file to load. Defaults to ``sets/default.yaml``
            shipped with this package.

    Returns:
        The parsed, validated ``StockConfig``.
    """
    path = config_path or _DEFAULT_CONFIG_PATH
    config = parse_config(load_yaml_file(path))

    _logger.info(
        "stock_config_loaded",
        extra={
            "config_name": config.name,
            "config_path": str(path),
            "checksum": config.checksum,
            "log_level": config.logging.level,
            "reference_max_length": config.validation.reference_max_length,
        },
    )
    return config


__all__ = [
    "StockConfig",
    "get_active_config",
]
