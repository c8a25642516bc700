"""
Module: adoption_kernel.models.adoption
Responsibility: ORM persistence for completed adoptions.  This table is the
    permanent audit trail of the platform.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Append-only: rows are created exactly once, as the last write of a
      successful finalization, and are never updated or deleted
      (ORM listeners in db/immutability.py).

Audit relevance:
    Each row references the adopter and the pet and records when the
    adoption happened and that the contract was signed.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from adoption_kernel.db.base import TrackedBase


class Adoption(TrackedBase):
    """A completed adoption.  Immutable after INSERT."""

    __tablename__ = "adoptions"

    __table_args__ = (
        Index("idx_adoptions_adopter", "adopter_id"),
        Index("idx_adoptions_pet", "pet_id"),
    )

    adopter_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
    )
    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id"),
        nullable=False,
    )
    adoption_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    contract_signed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    def __repr__(self) -> str:
        return f"<Adoption {self.id} pet={self.pet_id} adopter={self.adopter_id}>"
