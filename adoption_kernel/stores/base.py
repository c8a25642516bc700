"""
BaseStore -- abstract base for all entity stores.

Responsibility:
    Provides the common constructor and session-handling contract for every
    store.  A store receives the request-scoped SQLAlchemy ``Session`` and
    uses ``session.flush()`` -- never ``session.commit()``.

Invariants enforced:
    - Transaction boundaries belong to the caller.  A store never commits
      or rolls back, so several store calls can form one unit of work.
    - Conditional mutations report whether exactly one row was affected,
      letting callers tell "no such row" apart from success.
    - Only frozen DTOs cross the store boundary, never ORM instances.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session
from sqlalchemy.orm.util import identity_key

from adoption_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseStore(ABC, Generic[ModelType]):
    """
    Abstract base class for all stores.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    model: type[ModelType]

    def __init__(self, session: Session):
        """
        Initialize the store.

        Args:
            session: Request-scoped SQLAlchemy session.
        """
        self.session = session

    def _expire_cached(self, pk: int) -> None:
        """Expire the identity-mapped instance for ``pk`` after a bulk UPDATE.

        Conditional mutations bypass the unit of work, so any copy already
        loaded into the session would otherwise keep its old values.
        """
        obj = self.session.identity_map.get(identity_key(self.model, pk))
        if obj is not None:
            self.session.expire(obj)
