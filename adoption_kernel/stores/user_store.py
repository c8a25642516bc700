"""Store for platform users."""

from __future__ import annotations

from dataclasses import dataclass

from adoption_kernel.exceptions import UserNotFoundError
from adoption_kernel.models.user import User, UserType
from adoption_kernel.stores.base import BaseStore


@dataclass(frozen=True)
class UserInfo:
    """Immutable DTO for user data."""

    id: int
    username: str
    email: str
    full_name: str
    user_type: UserType
    is_active: bool


class UserStore(BaseStore[User]):
    """Create and look up users."""

    model = User

    def _to_dto(self, user: User) -> UserInfo:
        return UserInfo(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            user_type=UserType(user.user_type),
            is_active=user.is_active,
        )

    def create(
        self,
        username: str,
        email: str,
        full_name: str,
        user_type: UserType,
        user_id: int | None = None,
    ) -> UserInfo:
        """Insert a user and return its DTO.

        ``user_id`` may be given to pin the identifier (imports, fixtures).
        """
        user = User(
            id=user_id,
            username=username,
            email=email,
            full_name=full_name,
            user_type=user_type.value,
        )
        self.session.add(user)
        self.session.flush()
        return self._to_dto(user)

    def find_by_id(self, user_id: int) -> UserInfo | None:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def get_by_id(self, user_id: int) -> UserInfo:
        """
        Raises:
            UserNotFoundError: If the user doesn't exist.
        """
        user = self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return self._to_dto(user)
