"""
Store for pets.

Responsibility:
    Persistence of adoptable animals: intake, point reads (optionally
    row-locked), per-custodian and per-status listings, and the
    conditional status and detail mutations used by the services.

Invariants enforced:
    - ``mark_adopted`` only moves a pet out of AVAILABLE or PENDING, and
      sets adoption_date in the same statement.  Two finalizations racing
      for one pet cannot both see an affected row.
    - ``delete`` goes through the unit of work so the immutability
      listener refuses adopted pets.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import func, select, update

from adoption_kernel.exceptions import PetNotFoundError
from adoption_kernel.logging_config import get_logger
from adoption_kernel.models.pet import FINALIZABLE_PET_STATUSES, Gender, Pet, PetStatus
from adoption_kernel.stores.base import BaseStore

logger = get_logger("stores.pet")


@dataclass(frozen=True)
class PetInfo:
    """Immutable DTO for pet data."""

    id: int
    custodian_id: int
    name: str
    species: str
    breed: str | None
    age_years: int | None
    age_months: int | None
    gender: Gender
    description: str | None
    adoption_fee: Decimal | None
    status: PetStatus
    intake_date: date | None
    adoption_date: date | None

    @property
    def is_available(self) -> bool:
        return self.status == PetStatus.AVAILABLE

    @property
    def is_finalizable(self) -> bool:
        """Whether an adoption may still be finalized for this pet."""
        return self.status in FINALIZABLE_PET_STATUSES


class PetStore(BaseStore[Pet]):
    """Persistence operations for pets."""

    model = Pet

    def _to_dto(self, pet: Pet) -> PetInfo:
        return PetInfo(
            id=pet.id,
            custodian_id=pet.custodian_id,
            name=pet.name,
            species=pet.species,
            breed=pet.breed,
            age_years=pet.age_years,
            age_months=pet.age_months,
            gender=Gender(pet.gender),
            description=pet.description,
            adoption_fee=pet.adoption_fee,
            status=PetStatus(pet.status),
            intake_date=pet.intake_date,
            adoption_date=pet.adoption_date,
        )

    def _load(self, pet_id: int, lock: bool = False) -> Pet | None:
        if not lock:
            return self.session.get(Pet, pet_id)
        stmt = (
            select(Pet)
            .where(Pet.id == pet_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def create(
        self,
        custodian_id: int,
        name: str,
        species: str,
        breed: str | None = None,
        age_years: int | None = None,
        age_months: int | None = None,
        gender: Gender = Gender.UNKNOWN,
        description: str | None = None,
        adoption_fee: Decimal | None = None,
        intake_date: date | None = None,
        status: PetStatus = PetStatus.AVAILABLE,
        pet_id: int | None = None,
    ) -> PetInfo:
        """Insert a pet at intake and return its DTO."""
        pet = Pet(
            id=pet_id,
            custodian_id=custodian_id,
            name=name,
            species=species,
            breed=breed,
            age_years=age_years,
            age_months=age_months,
            gender=gender.value,
            description=description,
            adoption_fee=adoption_fee,
            intake_date=intake_date,
            status=status.value,
        )
        self.session.add(pet)
        self.session.flush()
        return self._to_dto(pet)

    def find_by_id(self, pet_id: int, lock: bool = False) -> PetInfo | None:
        """
        Find pet by ID, returning None if not found.

        Args:
            pet_id: Pet identifier.
            lock: If True, read with SELECT ... FOR UPDATE so that a
                concurrent writer of the same row waits for this
                transaction to finish (no-op on SQLite).
        """
        pet = self._load(pet_id, lock=lock)
        return self._to_dto(pet) if pet else None

    def get_by_id(self, pet_id: int, lock: bool = False) -> PetInfo:
        """
        Raises:
            PetNotFoundError: If the pet doesn't exist.
        """
        pet = self._load(pet_id, lock=lock)
        if pet is None:
            raise PetNotFoundError(pet_id)
        return self._to_dto(pet)

    def list_by_custodian(self, custodian_id: int) -> list[PetInfo]:
        """All pets of a custodian, newest intake first."""
        stmt = (
            select(Pet)
            .where(Pet.custodian_id == custodian_id)
            .order_by(Pet.created_at.desc(), Pet.id.desc())
        )
        return [self._to_dto(p) for p in self.session.execute(stmt).scalars()]

    def list_by_status(self, status: PetStatus) -> list[PetInfo]:
        stmt = (
            select(Pet)
            .where(Pet.status == status.value)
            .order_by(Pet.created_at.desc(), Pet.id.desc())
        )
        return [self._to_dto(p) for p in self.session.execute(stmt).scalars()]

    def count_available_for_custodian(self, custodian_id: int) -> int:
        stmt = select(func.count(Pet.id)).where(
            Pet.custodian_id == custodian_id,
            Pet.status == PetStatus.AVAILABLE.value,
        )
        return self.session.execute(stmt).scalar_one()

    def mark_adopted(self, pet_id: int, adoption_date: date) -> bool:
        """
        Conditionally move a pet to ADOPTED.

        Postconditions:
            Returns True iff exactly one row went from AVAILABLE/PENDING to
            ADOPTED with ``adoption_date`` set.  False means the pet does not
            exist or was no longer adoptable.
        """
        stmt = (
            update(Pet)
            .where(
                Pet.id == pet_id,
                Pet.status.in_([s.value for s in FINALIZABLE_PET_STATUSES]),
            )
            .values(status=PetStatus.ADOPTED.value, adoption_date=adoption_date)
            .execution_options(synchronize_session=False)
        )
        affected = self.session.execute(stmt).rowcount
        self._expire_cached(pet_id)
        logger.debug(
            "pet_mark_adopted",
            extra={"pet_id": pet_id, "rows_affected": affected},
        )
        return affected == 1

    def update_status(
        self,
        pet_id: int,
        new_status: PetStatus,
        from_statuses: Iterable[PetStatus],
    ) -> bool:
        """
        Conditionally change a pet's status.

        ADOPTED is reachable only through ``mark_adopted``.

        Returns:
            True iff exactly one row was in one of ``from_statuses`` and
            now has ``new_status``.
        """
        if new_status == PetStatus.ADOPTED:
            raise ValueError("use mark_adopted() to adopt a pet")
        stmt = (
            update(Pet)
            .where(
                Pet.id == pet_id,
                Pet.status.in_([s.value for s in from_statuses]),
            )
            .values(status=new_status.value)
            .execution_options(synchronize_session=False)
        )
        affected = self.session.execute(stmt).rowcount
        self._expire_cached(pet_id)
        return affected == 1

    def update_details(
        self,
        pet_id: int,
        name: str,
        species: str,
        breed: str | None,
        age_years: int | None,
        age_months: int | None,
        gender: Gender,
        description: str | None,
        adoption_fee: Decimal | None,
        intake_date: date | None,
    ) -> bool:
        """
        Overwrite the descriptive fields of a pet that has not been adopted.

        Status, custodian and adoption_date are never touched here.

        Returns:
            True iff exactly one non-ADOPTED row was updated.
        """
        stmt = (
            update(Pet)
            .where(Pet.id == pet_id, Pet.status != PetStatus.ADOPTED.value)
            .values(
                name=name,
                species=species,
                breed=breed,
                age_years=age_years,
                age_months=age_months,
                gender=gender.value,
                description=description,
                adoption_fee=adoption_fee,
                intake_date=intake_date,
            )
            .execution_options(synchronize_session=False)
        )
        affected = self.session.execute(stmt).rowcount
        self._expire_cached(pet_id)
        return affected == 1

    def delete(self, pet_id: int) -> bool:
        """Delete a pet.  Returns False if there was no such pet.

        Raises:
            ImmutabilityViolationError: If the pet has been adopted.
        """
        pet = self.session.get(Pet, pet_id)
        if pet is None:
            return False
        self.session.delete(pet)
        self.session.flush()
        return True
