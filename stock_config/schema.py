"""
Stock configuration schema.

The typed form of a stock configuration YAML file. The loader parses YAML
into these frozen dataclasses; nothing else in the system reads the YAML.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseConfig:
    """Where stock movements are stored."""

    url: str
    echo: bool = False
    pool_size: int = 10


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ValidationConfig:
    """Limits applied when a stock movement is validated."""

    reference_max_length: int = 191


@dataclass(frozen=True)
class StockConfig:
    """A complete, parsed stock configuration."""

    name: str
    database: DatabaseConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    checksum: str = ""
