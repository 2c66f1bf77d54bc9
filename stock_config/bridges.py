"""
Config -> Kernel Bridges.

Functions that turn a ``StockConfig`` into kernel inputs. They live in
stock_config because the kernel must NEVER import stock_config.

Usage:
    config = get_active_config()
    configure_logging_from(config)
    init_engine_from(config)
    with session_scope() as session:
        repository = build_stock_movement_repository(session, config)
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from stock_config.schema import StockConfig
from stock_kernel.db.engine import init_engine_from_url
from stock_kernel.domain.clock import Clock
from stock_kernel.logging_config import configure_logging
from stock_kernel.repositories.stock_movement import StockMovementRepository


def configure_logging_from(config: StockConfig) -> None:
    configure_logging(level=logging.getLevelName(config.logging.level))


def init_engine_from(config: StockConfig) -> Engine:
    return init_engine_from_url(
        config.database.url,
        echo=config.database.echo,
        pool_size=config.database.pool_size,
    )


def build_stock_movement_repository(
    session: Session,
    config: StockConfig,
    clock: Clock | None = None,
) -> StockMovementRepository:
    return StockMovementRepository(
        session,
        clock=clock,
        reference_max_length=config.validation.reference_max_length,
    )
