"""
ApplicationSubmissionGate -- admission control for new applications.

Responsibility:
    Creates a PENDING AdoptionApplication for a pet, but only while that pet
    is AVAILABLE.  The gate never touches the pet itself; only finalization
    changes availability.

Architecture position:
    Kernel > Services -- imperative shell.  Owns the transaction boundary of
    the session it is given.

Invariants enforced:
    - A pet that is not AVAILABLE accepts no new applications, so an ADOPTED
      pet can never gain a second approvable application.
    - status = PENDING and application_date = clock.now() are set here, never
      taken from the caller.
    - One application per (pet, adopter); a repeat is INVALID_STATE even when
      it loses a race and is only caught by the unique constraint.

Failure modes:
    INVALID_ARGUMENT (bad ids, negative household size), NOT_FOUND (pet or
    adopter), INVALID_STATE (pet not available, duplicate), STORAGE_FAILURE.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from adoption_kernel.db.engine import unit_of_work
from adoption_kernel.domain.clock import Clock, SystemClock
from adoption_kernel.domain.dtos import ApplicationDraft
from adoption_kernel.domain.validation import require_positive_id
from adoption_kernel.exceptions import (
    AdoptionKernelError,
    DuplicateApplicationError,
    InvalidFieldError,
    PetNotAvailableError,
    PetNotFoundError,
    UserNotFoundError,
)
from adoption_kernel.logging_config import LogContext, get_logger
from adoption_kernel.stores.application_store import ApplicationInfo, ApplicationStore
from adoption_kernel.stores.pet_store import PetStore
from adoption_kernel.stores.user_store import UserStore

logger = get_logger("services.submission")


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_STATE = "invalid_state"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class SubmissionResult:
    """Result of ApplicationSubmissionGate.submit_application()."""

    status: SubmissionStatus
    application: ApplicationInfo | None = None
    error: AdoptionKernelError | None = None

    @property
    def is_success(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTED


class ApplicationSubmissionGate:
    """Guards creation of adoption applications."""

    def __init__(self, session: Session, clock: Clock | None = None):
        self._session = session
        self._clock = clock or SystemClock()
        self._pets = PetStore(session)
        self._applications = ApplicationStore(session)
        self._users = UserStore(session)

    def submit_application(self, draft: ApplicationDraft) -> SubmissionResult:
        """
        Submit ``draft`` if its pet is AVAILABLE.

        Postconditions:
            - SUBMITTED: one new PENDING application dated clock.now().
            - Anything else: no row written; the pet is untouched either way.
        """
        with LogContext.bind(
            actor_id=str(draft.adopter_id),
            pet_id=str(draft.pet_id),
        ):
            try:
                application = self._do_submit(draft)
            except AdoptionKernelError as exc:
                logger.info(
                    "application_submission_rejected",
                    extra={"code": exc.code, "category": exc.category.value},
                )
                return SubmissionResult(
                    status=SubmissionStatus(exc.category.value),
                    error=exc,
                )

            logger.info(
                "application_submitted",
                extra={"application_id": application.id},
            )
            return SubmissionResult(
                status=SubmissionStatus.SUBMITTED,
                application=application,
            )

    def _do_submit(self, draft: ApplicationDraft) -> ApplicationInfo:
        require_positive_id("pet_id", draft.pet_id)
        require_positive_id("adopter_id", draft.adopter_id)
        if draft.household_members is not None and draft.household_members < 1:
            raise InvalidFieldError("household_members", "must be at least 1")

        with unit_of_work(self._session, "submit_application"):
            pet = self._pets.find_by_id(draft.pet_id)
            if pet is None:
                raise PetNotFoundError(draft.pet_id)
            if not pet.is_available:
                raise PetNotAvailableError(draft.pet_id, pet.status.value)
            if self._users.find_by_id(draft.adopter_id) is None:
                raise UserNotFoundError(draft.adopter_id)
            if self._applications.find_for_pet_and_adopter(draft.pet_id, draft.adopter_id):
                raise DuplicateApplicationError(draft.pet_id, draft.adopter_id)

            try:
                application = self._applications.create(
                    pet_id=draft.pet_id,
                    adopter_id=draft.adopter_id,
                    application_date=self._clock.now(),
                    application_text=draft.application_text,
                    reason_for_adoption=draft.reason_for_adoption,
                    household_members=draft.household_members,
                    has_yard=draft.has_yard,
                    previous_pet_experience=draft.previous_pet_experience,
                )
            except IntegrityError as exc:
                # Lost the race against an identical submission.
                raise DuplicateApplicationError(draft.pet_id, draft.adopter_id) from exc

        return application
