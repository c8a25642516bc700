"""
Module: adoption_kernel.models.custodian
Responsibility: ORM persistence for custodians (shelters).  A custodian owns
    pets until they are adopted and holds the right to finalize their
    adoptions.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Each custodian is operated by exactly one user, and a user operates at
      most one custodian (uq_custodians_user).  This row is the explicit
      user -> custodian mapping consulted by the authorization guard; a user
      id is never compared to a custodian id directly.
    - license_number is unique.
"""

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from adoption_kernel.db.base import TrackedBase


class Custodian(TrackedBase):
    """A shelter responsible for pets prior to adoption."""

    __tablename__ = "custodians"

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_custodians_user"),
        UniqueConstraint("license_number", name="uq_custodians_license"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    license_number: Mapped[str] = mapped_column(String(50), nullable=False)
    capacity: Mapped[int | None] = mapped_column(nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Custodian {self.id} {self.name} user={self.user_id}>"
