"""
Store for adoption records.

Append-only: the only write is ``create``.  There is no update or delete
method, and the ORM listeners refuse both.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select

from adoption_kernel.exceptions import StorageFailureError
from adoption_kernel.models.adoption import Adoption
from adoption_kernel.stores.base import BaseStore


@dataclass(frozen=True)
class AdoptionInfo:
    """Immutable DTO for an adoption record."""

    id: int
    adopter_id: int
    pet_id: int
    adoption_date: datetime
    contract_signed: bool


class AdoptionStore(BaseStore[Adoption]):
    """Persistence operations for adoption records."""

    model = Adoption

    def _to_dto(self, adoption: Adoption) -> AdoptionInfo:
        return AdoptionInfo(
            id=adoption.id,
            adopter_id=adoption.adopter_id,
            pet_id=adoption.pet_id,
            adoption_date=adoption.adoption_date,
            contract_signed=adoption.contract_signed,
        )

    def create(
        self,
        adopter_id: int,
        pet_id: int,
        adoption_date: datetime,
        contract_signed: bool = True,
    ) -> AdoptionInfo:
        """
        Insert one adoption record.

        Raises:
            StorageFailureError: If the INSERT produced no row identity.
            IntegrityError: On unknown adopter or pet ids.
        """
        adoption = Adoption(
            adopter_id=adopter_id,
            pet_id=pet_id,
            adoption_date=adoption_date,
            contract_signed=contract_signed,
        )
        self.session.add(adoption)
        self.session.flush()
        if adoption.id is None:
            raise StorageFailureError("create_adoption", "no row identity returned")
        return self._to_dto(adoption)

    def find_by_id(self, adoption_id: int) -> AdoptionInfo | None:
        adoption = self.session.get(Adoption, adoption_id)
        return self._to_dto(adoption) if adoption else None

    def list_by_adopter(self, adopter_id: int) -> list[AdoptionInfo]:
        stmt = (
            select(Adoption)
            .where(Adoption.adopter_id == adopter_id)
            .order_by(Adoption.adoption_date.desc(), Adoption.id.desc())
        )
        return [self._to_dto(a) for a in self.session.execute(stmt).scalars()]

    def list_by_pet(self, pet_id: int) -> list[AdoptionInfo]:
        stmt = (
            select(Adoption)
            .where(Adoption.pet_id == pet_id)
            .order_by(Adoption.id)
        )
        return [self._to_dto(a) for a in self.session.execute(stmt).scalars()]

    def count_for_pet(self, pet_id: int) -> int:
        stmt = select(func.count(Adoption.id)).where(Adoption.pet_id == pet_id)
        return self.session.execute(stmt).scalar_one()
