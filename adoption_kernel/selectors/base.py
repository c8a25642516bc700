"""
Module: adoption_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors are the read side next to the stores: joined, display-shaped
    views across several tables, with no mutation capability.
Architecture position: Kernel > Selectors.  May import from db/base.py and
    models/.  MUST NOT import from services/ or stores/.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses, NOT raw ORM
      model instances.
    - Session ownership: the caller owns the session and its transaction scope.

Failure modes:
    - Return empty lists when nothing matches; never raise on absence of data.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from adoption_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        """
        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
