"""
Module: adoption_kernel.selectors.adoption_selector
Responsibility: Read-only display views over completed adoptions: an
    adopter's adopted pets and the public "happy families" wall.
Architecture position: Kernel > Selectors.  May import from models/ and
    selectors/base.py.

Invariants enforced:
    - Read-only: No mutations performed on any queried data.
    - Most recent adoption first; ties broken by adoption id, newest first.

Failure modes:
    - Returns an empty list when no adoptions match.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select

from adoption_kernel.models.adoption import Adoption
from adoption_kernel.models.custodian import Custodian
from adoption_kernel.models.pet import Pet
from adoption_kernel.models.user import User
from adoption_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class AdoptedPetDTO:
    """One adoption as shown on an adopter's profile."""

    adoption_id: int
    pet_id: int
    pet_name: str
    species: str
    breed: str | None
    adoption_date: datetime
    contract_signed: bool


@dataclass(frozen=True)
class HappyFamilyDTO:
    """One adoption as shown on the public success-stories page."""

    adoption_id: int
    pet_id: int
    pet_name: str
    species: str
    breed: str | None
    adopter_id: int
    adopter_name: str
    custodian_name: str
    adoption_date: datetime


class AdoptionSelector(BaseSelector[Adoption]):
    """
    Selector for completed adoptions.

    Guarantees:
        - One query per call; pet, adopter and custodian columns come from
          joins, not lazy loads.
    """

    def adoptions_by_adopter(self, adopter_id: int) -> list[AdoptedPetDTO]:
        """Pets adopted by ``adopter_id``, most recent first."""
        stmt = (
            select(
                Adoption.id,
                Adoption.pet_id,
                Pet.name,
                Pet.species,
                Pet.breed,
                Adoption.adoption_date,
                Adoption.contract_signed,
            )
            .join(Pet, Pet.id == Adoption.pet_id)
            .where(Adoption.adopter_id == adopter_id)
            .order_by(Adoption.adoption_date.desc(), Adoption.id.desc())
        )
        return [
            AdoptedPetDTO(
                adoption_id=row[0],
                pet_id=row[1],
                pet_name=row[2],
                species=row[3],
                breed=row[4],
                adoption_date=row[5],
                contract_signed=row[6],
            )
            for row in self.session.execute(stmt)
        ]

    def happy_families(self, limit: int | None = None) -> list[HappyFamilyDTO]:
        """
        Every completed adoption with pet, adopter and shelter names.

        Args:
            limit: Optional cap on the number of rows (most recent kept).
        """
        stmt = (
            select(
                Adoption.id,
                Adoption.pet_id,
                Pet.name,
                Pet.species,
                Pet.breed,
                Adoption.adopter_id,
                User.full_name,
                Custodian.name,
                Adoption.adoption_date,
            )
            .join(Pet, Pet.id == Adoption.pet_id)
            .join(User, User.id == Adoption.adopter_id)
            .join(Custodian, Custodian.id == Pet.custodian_id)
            .order_by(Adoption.adoption_date.desc(), Adoption.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        return [
            HappyFamilyDTO(
                adoption_id=row[0],
                pet_id=row[1],
                pet_name=row[2],
                species=row[3],
                breed=row[4],
                adopter_id=row[5],
                adopter_name=row[6],
                custodian_name=row[7],
                adoption_date=row[8],
            )
            for row in self.session.execute(stmt)
        ]
