"""
Module: adoption_kernel.models.user
Responsibility: ORM persistence for platform users (administrators, shelter
    staff, adopters).  Users are the identities that submit applications and
    review them.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - username and email are unique (uq_users_username, uq_users_email).
    - user_type is one of ADMIN, SHELTER, ADOPTER.

Non-goals:
    Password hashing, login and session cookies are handled by the web layer.
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from adoption_kernel.db.base import TrackedBase


class UserType(str, Enum):
    """Role of a platform user."""

    ADMIN = "admin"
    SHELTER = "shelter"
    ADOPTER = "adopter"


class User(TrackedBase):
    """
    A person who uses the platform.

    Guarantees:
        - username and email are globally unique.
        - user_type is fixed at registration.
    """

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint(
            "user_type IN ('admin', 'shelter', 'adopter')",
            name="ck_users_valid_type",
        ),
        Index("idx_users_type", "user_type"),
    )

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    user_type: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username} type={self.user_type}>"
