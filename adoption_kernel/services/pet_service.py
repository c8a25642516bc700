"""
Service layer for pet intake and lifecycle.

Custodians register pets, edit their details, archive them and remove
them.  Adoption itself is not here (see AdoptionFinalizationCoordinator).

Returns PetInfo DTOs instead of ORM entities.  Failures raise the typed
kernel exceptions; mutations commit through unit_of_work().
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from adoption_kernel.db.engine import unit_of_work
from adoption_kernel.domain.dtos import PetDraft
from adoption_kernel.domain.validation import require_positive_id
from adoption_kernel.exceptions import (
    CustodianNotFoundError,
    InvalidFieldError,
    InvalidIdentifierError,
    PetAdoptedError,
    PetNotFoundError,
    WriteNotAppliedError,
)
from adoption_kernel.logging_config import get_logger
from adoption_kernel.models.pet import Gender, PetStatus
from adoption_kernel.services.authorization_guard import MANAGE_PETS, AuthorizationGuard
from adoption_kernel.stores.custodian_store import CustodianStore
from adoption_kernel.stores.pet_store import PetInfo, PetStore

logger = get_logger("services.pet")

ARCHIVABLE_PET_STATUSES = frozenset({PetStatus.AVAILABLE, PetStatus.PENDING})


def validate_pet_draft(draft: PetDraft) -> None:
    """
    Raises:
        InvalidIdentifierError: If custodian_id is not positive.
        InvalidFieldError: On the first field that fails validation.
    """
    require_positive_id("custodian_id", draft.custodian_id)
    if not draft.name or not draft.name.strip():
        raise InvalidFieldError("name", "pet name is required")
    if not draft.species or not draft.species.strip():
        raise InvalidFieldError("species", "species is required")
    if not isinstance(draft.gender, Gender):
        raise InvalidFieldError("gender", f"unknown gender {draft.gender!r}")
    if draft.age_years is not None and draft.age_years < 0:
        raise InvalidFieldError("age_years", "cannot be negative")
    if draft.age_months is not None and not 0 <= draft.age_months <= 11:
        raise InvalidFieldError("age_months", "must be between 0 and 11")
    if draft.adoption_fee is not None and draft.adoption_fee < Decimal("0"):
        raise InvalidFieldError("adoption_fee", "cannot be negative")


class PetService:
    """
    Service for managing a custodian's pets.

    Every mutation is authorized with the custodian-ownership rule: only
    the user operating the pet's custodian may register, archive or remove
    it.
    """

    def __init__(self, session: Session, guard: AuthorizationGuard | None = None):
        self.session = session
        self._pets = PetStore(session)
        self._custodians = CustodianStore(session)
        self._guard = guard or AuthorizationGuard(self._custodians)

    def register_intake(self, acting_user_id: int, draft: PetDraft) -> PetInfo:
        """
        Register a newly arrived pet as AVAILABLE.

        Args:
            acting_user_id: User performing the intake.
            draft: Pet details; draft.custodian_id names the receiving shelter.

        Returns:
            PetInfo DTO of the new pet.

        Raises:
            InvalidIdentifierError / InvalidFieldError: Bad input.
            CustodianNotFoundError: Unknown custodian.
            AccessDeniedError: acting_user_id does not operate the custodian.
            StorageFailureError: The insert or commit failed.
        """
        require_positive_id("acting_user_id", acting_user_id)
        validate_pet_draft(draft)

        with unit_of_work(self.session, "register_intake"):
            if self._custodians.find_by_id(draft.custodian_id) is None:
                raise CustodianNotFoundError(draft.custodian_id)
            self._guard.require_custodian(draft.custodian_id, acting_user_id, MANAGE_PETS)
            pet = self._pets.create(
                custodian_id=draft.custodian_id,
                name=draft.name.strip(),
                species=draft.species.strip(),
                breed=draft.breed,
                age_years=draft.age_years,
                age_months=draft.age_months,
                gender=draft.gender,
                description=draft.description,
                adoption_fee=draft.adoption_fee,
                intake_date=draft.intake_date,
            )

        logger.info(
            "pet_registered",
            extra={
                "pet_id": pet.id,
                "custodian_id": pet.custodian_id,
                "species": pet.species,
            },
        )
        return pet

    def archive_pet(self, pet_id: int, acting_user_id: int) -> PetInfo:
        """
        Take a pet off the adoption listings.

        Archiving an already ARCHIVED pet returns it unchanged.

        Raises:
            PetNotFoundError, AccessDeniedError,
            PetAdoptedError: The pet was adopted.
        """
        require_positive_id("pet_id", pet_id)
        require_positive_id("acting_user_id", acting_user_id)

        with unit_of_work(self.session, "archive_pet"):
            pet = self._load_for_update(pet_id, acting_user_id)
            if pet.status == PetStatus.ADOPTED:
                raise PetAdoptedError(pet_id, "archive")
            if pet.status in ARCHIVABLE_PET_STATUSES:
                if not self._pets.update_status(
                    pet_id, PetStatus.ARCHIVED, ARCHIVABLE_PET_STATUSES,
                ):
                    raise WriteNotAppliedError("Pet", pet_id, "archive_pet")
            archived = self._pets.get_by_id(pet_id)

        logger.info("pet_archived", extra={"pet_id": pet_id})
        return archived

    def update_details(self, pet_id: int, acting_user_id: int, draft: PetDraft) -> PetInfo:
        """
        Replace a pet's descriptive fields (name, breed, age, fee, ...).

        draft.custodian_id must be the pet's current custodian; moving a pet
        between shelters is not an edit.

        Raises:
            InvalidIdentifierError / InvalidFieldError: Bad input.
            PetNotFoundError, AccessDeniedError,
            PetAdoptedError: The pet was adopted.
        """
        require_positive_id("pet_id", pet_id)
        require_positive_id("acting_user_id", acting_user_id)
        validate_pet_draft(draft)

        with unit_of_work(self.session, "update_pet_details"):
            pet = self._load_for_update(pet_id, acting_user_id)
            if pet.custodian_id != draft.custodian_id:
                raise InvalidFieldError("custodian_id", "cannot change a pet's custodian")
            if pet.status == PetStatus.ADOPTED:
                raise PetAdoptedError(pet_id, "update")
            if not self._pets.update_details(
                pet_id,
                name=draft.name.strip(),
                species=draft.species.strip(),
                breed=draft.breed,
                age_years=draft.age_years,
                age_months=draft.age_months,
                gender=draft.gender,
                description=draft.description,
                adoption_fee=draft.adoption_fee,
                intake_date=draft.intake_date,
            ):
                raise WriteNotAppliedError("Pet", pet_id, "update_pet_details")
            updated = self._pets.get_by_id(pet_id)

        logger.info("pet_details_updated", extra={"pet_id": pet_id})
        return updated

    def remove_pet(self, pet_id: int, acting_user_id: int) -> None:
        """
        Delete a pet record (entered in error, transferred out, ...).

        Its applications go with it.  Adopted pets are never removed.

        Raises:
            PetNotFoundError, AccessDeniedError, PetAdoptedError.
        """
        require_positive_id("pet_id", pet_id)
        require_positive_id("acting_user_id", acting_user_id)

        with unit_of_work(self.session, "remove_pet"):
            pet = self._load_for_update(pet_id, acting_user_id)
            if pet.status == PetStatus.ADOPTED:
                raise PetAdoptedError(pet_id, "remove")
            if not self._pets.delete(pet_id):
                raise PetNotFoundError(pet_id)

        logger.info("pet_removed", extra={"pet_id": pet_id})

    def _load_for_update(self, pet_id: int, acting_user_id: int) -> PetInfo:
        pet = self._pets.get_by_id(pet_id, lock=True)
        self._guard.require_custodian(pet.custodian_id, acting_user_id, MANAGE_PETS)
        return pet

    # Queries

    def get_pet(self, pet_id: int) -> PetInfo:
        require_positive_id("pet_id", pet_id)
        return self._pets.get_by_id(pet_id)

    def is_available(self, pet_id: int) -> bool:
        """True iff the pet exists and is AVAILABLE.  Never raises for unknown ids."""
        try:
            require_positive_id("pet_id", pet_id)
        except InvalidIdentifierError:
            return False
        pet = self._pets.find_by_id(pet_id)
        return pet is not None and pet.is_available

    def available_pets(self) -> list[PetInfo]:
        return self._pets.list_by_status(PetStatus.AVAILABLE)

    def pets_for_custodian(self, custodian_id: int) -> list[PetInfo]:
        require_positive_id("custodian_id", custodian_id)
        return self._pets.list_by_custodian(custodian_id)

    def available_count_for_custodian(self, custodian_id: int) -> int:
        require_positive_id("custodian_id", custodian_id)
        return self._pets.count_available_for_custodian(custodian_id)
