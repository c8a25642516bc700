"""
Module: adoption_kernel.models.pet
Responsibility: ORM persistence for adoptable animals.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Every pet belongs to exactly one custodian (custodian_id NOT NULL).
    - status is one of available, pending, adopted, archived.
    - adoption_date is set if and only if status is adopted
      (ck_pets_adoption_date).
    - An adopted pet is never deleted (ORM listener in db/immutability.py).

Failure modes:
    - IntegrityError on unknown custodian_id or invalid status value.
"""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from adoption_kernel.db.base import TrackedBase


class PetStatus(str, Enum):
    """Pet lifecycle status.

    AVAILABLE and PENDING pets may be adopted.  ADOPTED and ARCHIVED are
    terminal for application-driven transitions.
    """

    AVAILABLE = "available"
    PENDING = "pending"
    ADOPTED = "adopted"
    ARCHIVED = "archived"


FINALIZABLE_PET_STATUSES = frozenset({PetStatus.AVAILABLE, PetStatus.PENDING})


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class Pet(TrackedBase):
    """
    An adoptable animal held by a custodian.

    Guarantees:
        - custodian_id never changes after intake.
        - status changes only through PetStore mutations.
    """

    __tablename__ = "pets"

    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'pending', 'adopted', 'archived')",
            name="ck_pets_valid_status",
        ),
        CheckConstraint(
            "(status = 'adopted' AND adoption_date IS NOT NULL) "
            "OR (status <> 'adopted' AND adoption_date IS NULL)",
            name="ck_pets_adoption_date",
        ),
        CheckConstraint(
            "age_months IS NULL OR (age_months >= 0 AND age_months <= 11)",
            name="ck_pets_age_months",
        ),
        Index("idx_pets_status", "status"),
        Index("idx_pets_custodian_status", "custodian_id", "status"),
    )

    custodian_id: Mapped[int] = mapped_column(
        ForeignKey("custodians.id", ondelete="RESTRICT"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    species: Mapped[str] = mapped_column(String(50), nullable=False)
    breed: Mapped[str | None] = mapped_column(String(100), nullable=True)
    age_years: Mapped[int | None] = mapped_column(nullable=True)
    age_months: Mapped[int | None] = mapped_column(nullable=True)
    gender: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Gender.UNKNOWN.value,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    adoption_fee: Mapped[Decimal | None] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PetStatus.AVAILABLE.value,
    )
    intake_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    adoption_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Pet {self.id} {self.name} status={self.status}>"
