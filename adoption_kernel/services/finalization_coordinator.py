"""
AdoptionFinalizationCoordinator -- atomic adoption finalization.

Responsibility:
    Turns "pet available + application pending" into "pet adopted +
    application approved + adoption record created" as one unit of work,
    after the reviewer has been authorized against the pet's custodian.

Architecture position:
    Kernel > Services -- imperative shell, owns the transaction boundary of
    the request-scoped session it is given.  Delegates persistence to the
    Pet, Application and Adoption stores and the ownership rule to
    AuthorizationGuard.

Finalization flow:
    finalize_adoption(pet_id, application_id, decision_date, notes, reviewer_id)
      1. Validate identifiers and decision date        -> INVALID_ARGUMENT
      2. Load the pet (row lock)                        -> NOT_FOUND
      3. Authorize reviewer against pet's custodian     -> ACCESS_DENIED
      4. Load the application (row lock)                -> NOT_FOUND
      5. Check application/pet state                    -> INVALID_STATE
      6. Pet -> ADOPTED (adoption_date = decision date)
      7. Application -> APPROVED (notes, reviewer, decided_at)
      8. Insert Adoption(adopter, pet, date, contract_signed=True)
      9. Commit; any failure in 6-9 rolls back all three   -> STORAGE_FAILURE

Invariants enforced:
    - Steps 1-5 perform no writes.  Authorization precedes the application
      lookup so an unauthorized caller cannot test which application ids exist.
    - Steps 6-8 run in the fixed order pet, application, adoption inside a
      single transaction; each must affect exactly one row or the whole
      unit of work is rolled back.
    - Two finalizations of the same pet cannot both commit: the pet UPDATE
      is conditional on an adoptable status and the rows are locked
      (PostgreSQL) or writers are serialized (SQLite).
    - The rollback of a failed unit of work never masks its cause; a
      rollback failure is logged separately.

Failure modes:
    All five error categories come back as a FinalizationResult, never as a
    raised exception.  Exceptions that are not AdoptionKernelError or
    SQLAlchemyError (programming errors) are rolled back and re-raised.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy.orm import Session

from adoption_kernel.db.engine import unit_of_work
from adoption_kernel.domain.clock import Clock, SystemClock
from adoption_kernel.domain.validation import require_positive_id
from adoption_kernel.exceptions import (
    AccessDeniedError,
    AdoptionKernelError,
    ApplicationNotFoundError,
    ApplicationNotPendingError,
    ApplicationPetMismatchError,
    ErrorCategory,
    InvalidFieldError,
    PetNotAvailableError,
    PetNotFoundError,
    WriteNotAppliedError,
)
from adoption_kernel.logging_config import LogContext, get_logger
from adoption_kernel.models.application import ApplicationStatus
from adoption_kernel.services.authorization_guard import (
    FINALIZE_ADOPTION,
    AuthorizationGuard,
)
from adoption_kernel.stores.adoption_store import AdoptionInfo, AdoptionStore
from adoption_kernel.stores.application_store import ApplicationStore
from adoption_kernel.stores.custodian_store import CustodianStore
from adoption_kernel.stores.pet_store import PetStore

logger = get_logger("services.finalization")


class FinalizationStatus(str, Enum):
    """Outcome of a finalization attempt.

    Every non-success member mirrors an ErrorCategory value.
    """

    FINALIZED = "finalized"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_STATE = "invalid_state"
    STORAGE_FAILURE = "storage_failure"

    @classmethod
    def for_category(cls, category: ErrorCategory) -> FinalizationStatus:
        return cls(category.value)


@dataclass(frozen=True)
class FinalizationResult:
    """Result of AdoptionFinalizationCoordinator.finalize_adoption()."""

    status: FinalizationStatus
    pet_id: object
    application_id: object
    adoption: AdoptionInfo | None = None
    error: AdoptionKernelError | None = None

    @property
    def is_success(self) -> bool:
        return self.status == FinalizationStatus.FINALIZED

    @classmethod
    def failed(
        cls,
        error: AdoptionKernelError,
        pet_id: object,
        application_id: object,
    ) -> FinalizationResult:
        return cls(
            status=FinalizationStatus.for_category(error.category),
            pet_id=pet_id,
            application_id=application_id,
            error=error,
        )


class AdoptionFinalizationCoordinator:
    """
    Finalizes adoptions atomically.

    Contract:
        Receives the request-scoped ``Session`` explicitly and is its sole
        user for the duration of ``finalize_adoption``.  The session holds
        no open transaction when the call returns: it has been committed on
        success and rolled back on every failure path.

    Non-goals:
        - Does NOT retry.  STORAGE_FAILURE leaves the state exactly as it
          was before the call, so the caller may simply call again.
        - Does NOT authenticate the reviewer; the HTTP layer does.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        guard: AuthorizationGuard | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._pets = PetStore(session)
        self._applications = ApplicationStore(session)
        self._adoptions = AdoptionStore(session)
        self._guard = guard or AuthorizationGuard(CustodianStore(session))

    def finalize_adoption(
        self,
        pet_id: int,
        application_id: int,
        decision_date: date,
        notes: str | None,
        reviewer_id: int,
    ) -> FinalizationResult:
        """
        Finalize the adoption of ``pet_id`` through ``application_id``.

        Postconditions:
            - FINALIZED: pet is ADOPTED with adoption_date == decision_date,
              the application is APPROVED with reviewed_by == reviewer_id,
              and exactly one new Adoption row references both.
            - Anything else: pets, applications and adoptions are unchanged.

        Args:
            pet_id: Pet to adopt.
            application_id: PENDING application being approved.
            decision_date: Adoption date recorded on the pet and the record.
            notes: Free-text reviewer notes stored on the application.
            reviewer_id: User id of the authenticated reviewer.

        Returns:
            FinalizationResult carrying the new AdoptionInfo or the typed error.
        """
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(reviewer_id),
            pet_id=str(pet_id),
            application_id=str(application_id),
        ):
            logger.info(
                "finalization_started",
                extra={"decision_date": str(decision_date)},
            )
            t0 = time.monotonic()

            try:
                adoption = self._do_finalize(
                    pet_id, application_id, decision_date, notes, reviewer_id,
                )
            except AccessDeniedError as exc:
                logger.warning(
                    "finalization_access_denied",
                    extra={
                        "reviewer_id": reviewer_id,
                        "custodian_id": exc.owner_id,
                    },
                )
                return FinalizationResult.failed(exc, pet_id, application_id)
            except AdoptionKernelError as exc:
                duration_ms = round((time.monotonic() - t0) * 1000, 2)
                if exc.category == ErrorCategory.STORAGE_FAILURE:
                    logger.error(
                        "finalization_failed",
                        extra={"duration_ms": duration_ms},
                        exc_info=True,
                    )
                else:
                    logger.info(
                        "finalization_rejected",
                        extra={
                            "code": exc.code,
                            "category": exc.category.value,
                            "duration_ms": duration_ms,
                        },
                    )
                return FinalizationResult.failed(exc, pet_id, application_id)
            except Exception:
                logger.error("finalization_failed", exc_info=True)
                raise

            duration_ms = round((time.monotonic() - t0) * 1000, 2)
            logger.info(
                "finalization_completed",
                extra={
                    "adoption_id": adoption.id,
                    "adopter_id": adoption.adopter_id,
                    "duration_ms": duration_ms,
                },
            )
            return FinalizationResult(
                status=FinalizationStatus.FINALIZED,
                pet_id=pet_id,
                application_id=application_id,
                adoption=adoption,
            )

    def _do_finalize(
        self,
        pet_id: int,
        application_id: int,
        decision_date: date,
        notes: str | None,
        reviewer_id: int,
    ) -> AdoptionInfo:
        require_positive_id("pet_id", pet_id)
        require_positive_id("application_id", application_id)
        require_positive_id("reviewer_id", reviewer_id)
        if isinstance(decision_date, datetime):
            decision_date = decision_date.date()
        elif not isinstance(decision_date, date):
            raise InvalidFieldError("decision_date", "a date is required")

        with unit_of_work(self._session, "finalize_adoption"):
            pet = self._pets.find_by_id(pet_id, lock=True)
            if pet is None:
                raise PetNotFoundError(pet_id)

            self._guard.require_custodian(pet.custodian_id, reviewer_id, FINALIZE_ADOPTION)

            application = self._applications.find_by_id(application_id, lock=True)
            if application is None:
                raise ApplicationNotFoundError(application_id)
            if application.pet_id != pet_id:
                raise ApplicationPetMismatchError(application_id, pet_id, application.pet_id)
            if not application.is_pending:
                raise ApplicationNotPendingError(application_id, application.status.value)
            if not pet.is_finalizable:
                raise PetNotAvailableError(pet_id, pet.status.value)

            decided_at = self._clock.now()

            if not self._pets.mark_adopted(pet_id, decision_date):
                raise WriteNotAppliedError("Pet", pet_id, "mark_adopted")

            if not self._applications.record_decision(
                application_id,
                ApplicationStatus.APPROVED,
                notes,
                reviewer_id,
                decided_at,
            ):
                raise WriteNotAppliedError("AdoptionApplication", application_id, "record_decision")

            adoption = self._adoptions.create(
                adopter_id=application.adopter_id,
                pet_id=pet_id,
                adoption_date=datetime.combine(decision_date, decided_at.timetz()),
                contract_signed=True,
            )

        return adoption
