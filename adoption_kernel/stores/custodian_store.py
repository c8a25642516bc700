"""
Store for custodians (shelters).

Also the user -> custodian identity mapping consulted by the
authorization guard.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select

from adoption_kernel.exceptions import CustodianNotFoundError
from adoption_kernel.models.custodian import Custodian
from adoption_kernel.stores.base import BaseStore


@dataclass(frozen=True)
class CustodianInfo:
    """Immutable DTO for custodian data."""

    id: int
    user_id: int
    name: str
    license_number: str
    capacity: int | None
    is_verified: bool


class CustodianStore(BaseStore[Custodian]):
    """Create and look up custodians."""

    model = Custodian

    def _to_dto(self, custodian: Custodian) -> CustodianInfo:
        return CustodianInfo(
            id=custodian.id,
            user_id=custodian.user_id,
            name=custodian.name,
            license_number=custodian.license_number,
            capacity=custodian.capacity,
            is_verified=custodian.is_verified,
        )

    def create(
        self,
        user_id: int,
        name: str,
        license_number: str,
        capacity: int | None = None,
        custodian_id: int | None = None,
    ) -> CustodianInfo:
        custodian = Custodian(
            id=custodian_id,
            user_id=user_id,
            name=name,
            license_number=license_number,
            capacity=capacity,
        )
        self.session.add(custodian)
        self.session.flush()
        return self._to_dto(custodian)

    def find_by_id(self, custodian_id: int) -> CustodianInfo | None:
        custodian = self.session.get(Custodian, custodian_id)
        return self._to_dto(custodian) if custodian else None

    def get_by_id(self, custodian_id: int) -> CustodianInfo:
        """
        Raises:
            CustodianNotFoundError: If the custodian doesn't exist.
        """
        custodian = self.session.get(Custodian, custodian_id)
        if custodian is None:
            raise CustodianNotFoundError(custodian_id)
        return self._to_dto(custodian)

    def find_by_user(self, user_id: int) -> CustodianInfo | None:
        """Return the custodian operated by ``user_id``, if any."""
        stmt = select(Custodian).where(Custodian.user_id == user_id)
        custodian = self.session.execute(stmt).scalar_one_or_none()
        return self._to_dto(custodian) if custodian else None
