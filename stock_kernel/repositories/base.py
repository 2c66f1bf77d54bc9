"""
AbstractRepository -- base for the stock kernel's repository wrappers.

Responsibility:
    Holds the caller's SQLAlchemy ``Session`` and the persist/flush/save
    helpers every repository shares.

Invariants enforced:
    Transaction boundaries: repositories flush within the caller's
    transaction and never commit or roll back themselves. The caller (or
    ``stock_kernel.db.engine.session_scope``) owns commit/rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from stock_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class AbstractRepository(ABC, Generic[ModelType]):
    """
    Abstract base class for all repositories.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    model_class: type[ModelType]

    def __init__(self, session: Session):
        self.session = session

    def persist(self, entity: ModelType) -> None:
        self.session.add(entity)

    def flush(self) -> None:
        self.session.flush()

    def save(self, entity: ModelType) -> None:
        """Helper for calling persist and flush successively."""
        self.persist(entity)
        self.flush()
