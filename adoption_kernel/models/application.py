"""
Module: adoption_kernel.models.application
Responsibility: ORM persistence for adoption applications: one adopter's
    request for one pet.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - An adopter files at most one application per pet
      (uq_applications_pet_adopter).
    - status is one of pending, approved, rejected, withdrawn; pending is
      initial and the others are terminal.
    - approved/rejected rows carry decided_at and reviewed_by; pending and
      withdrawn rows carry neither (ck_applications_decision_fields).
    - A terminal status never changes again (ORM listener in
      db/immutability.py, conditional UPDATEs in ApplicationStore).
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from adoption_kernel.db.base import TrackedBase


class ApplicationStatus(str, Enum):
    """Application lifecycle status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


TERMINAL_APPLICATION_STATUSES = frozenset({
    ApplicationStatus.APPROVED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
})


class AdoptionApplication(TrackedBase):
    """An adopter's request to adopt a specific pet."""

    __tablename__ = "adoption_applications"

    __table_args__ = (
        UniqueConstraint("pet_id", "adopter_id", name="uq_applications_pet_adopter"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'withdrawn')",
            name="ck_applications_valid_status",
        ),
        CheckConstraint(
            "(status IN ('approved', 'rejected') "
            "AND decided_at IS NOT NULL AND reviewed_by IS NOT NULL) "
            "OR (status IN ('pending', 'withdrawn') "
            "AND decided_at IS NULL AND reviewed_by IS NULL)",
            name="ck_applications_decision_fields",
        ),
        Index("idx_applications_adopter", "adopter_id"),
        Index("idx_applications_pending", "status", "application_date"),
    )

    pet_id: Mapped[int] = mapped_column(
        ForeignKey("pets.id", ondelete="CASCADE"),
        nullable=False,
    )
    adopter_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    application_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApplicationStatus.PENDING.value,
    )
    application_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    reason_for_adoption: Mapped[str | None] = mapped_column(Text, nullable=True)
    household_members: Mapped[int | None] = mapped_column(nullable=True)
    has_yard: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    previous_pet_experience: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Decision fields (approved/rejected only)
    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AdoptionApplication {self.id} pet={self.pet_id} "
            f"adopter={self.adopter_id} status={self.status}>"
        )
