"""
ApplicationReviewService -- the non-approving decision paths and queries.

Responsibility:
    Rejection by the pet's custodian, withdrawal by the filing adopter, and
    the review-queue reads (pending queue, per pet, per adopter, pending
    count).  Approval is not here: it is only reachable through
    AdoptionFinalizationCoordinator, because approving without adopting
    would break the pet/application/adoption agreement.

Architecture position:
    Kernel > Services -- imperative shell.  Mutations commit through
    unit_of_work(); queries are read-only and leave the session as found.

Invariants enforced:
    - Rejection requires the same custodian-ownership rule as finalization,
      checked before any write.
    - Only PENDING applications are rejected or withdrawn; the conditional
      UPDATE is the final arbiter under concurrency.
    - Withdrawal leaves decided_at/reviewed_by unset.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.orm import Session

from adoption_kernel.db.engine import unit_of_work
from adoption_kernel.domain.clock import Clock, SystemClock
from adoption_kernel.domain.validation import require_positive_id
from adoption_kernel.exceptions import (
    AccessDeniedError,
    AdoptionKernelError,
    ApplicationNotFoundError,
    ApplicationNotPendingError,
    PetNotFoundError,
    WriteNotAppliedError,
)
from adoption_kernel.logging_config import LogContext, get_logger
from adoption_kernel.models.application import ApplicationStatus
from adoption_kernel.services.authorization_guard import (
    REJECT_APPLICATION,
    AuthorizationGuard,
)
from adoption_kernel.stores.application_store import ApplicationInfo, ApplicationStore
from adoption_kernel.stores.custodian_store import CustodianStore
from adoption_kernel.stores.pet_store import PetStore

logger = get_logger("services.review")

WITHDRAW_APPLICATION = "withdraw applications"


class ReviewStatus(str, Enum):
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_STATE = "invalid_state"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class ReviewResult:
    """Result of a reject or withdraw call."""

    status: ReviewStatus
    application_id: object
    application: ApplicationInfo | None = None
    error: AdoptionKernelError | None = None

    @property
    def is_success(self) -> bool:
        return self.status in (ReviewStatus.REJECTED, ReviewStatus.WITHDRAWN)


class ApplicationReviewService:
    """
    Reject, withdraw and list adoption applications.

    Contract:
        Mutating methods return a ReviewResult and never raise the kernel's
        error categories.  Query methods validate their id argument and
        raise InvalidIdentifierError on a bad one; they return DTO lists.
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
        self._guard = guard or AuthorizationGuard(CustodianStore(session))

    # Mutations

    def reject_application(
        self,
        application_id: int,
        notes: str | None,
        reviewer_id: int,
    ) -> ReviewResult:
        """
        Move a PENDING application to REJECTED.

        The reviewer must operate the custodian of the application's pet.
        The pet's status is not changed.
        """
        with LogContext.bind(
            actor_id=str(reviewer_id),
            application_id=str(application_id),
        ):
            try:
                require_positive_id("application_id", application_id)
                require_positive_id("reviewer_id", reviewer_id)
                with unit_of_work(self._session, "reject_application"):
                    application = self._applications.find_by_id(application_id, lock=True)
                    if application is None:
                        raise ApplicationNotFoundError(application_id)
                    pet = self._pets.find_by_id(application.pet_id)
                    if pet is None:
                        raise PetNotFoundError(application.pet_id)
                    self._guard.require_custodian(
                        pet.custodian_id, reviewer_id, REJECT_APPLICATION,
                    )
                    if not application.is_pending:
                        raise ApplicationNotPendingError(
                            application_id, application.status.value,
                        )
                    if not self._applications.record_decision(
                        application_id,
                        ApplicationStatus.REJECTED,
                        notes,
                        reviewer_id,
                        self._clock.now(),
                    ):
                        raise WriteNotAppliedError(
                            "AdoptionApplication", application_id, "reject_application",
                        )
                    updated = self._applications.get_by_id(application_id)
            except AdoptionKernelError as exc:
                return self._failed("reject_application", exc, application_id)

            logger.info(
                "application_rejected",
                extra={"pet_id": updated.pet_id, "reviewer_id": reviewer_id},
            )
            return ReviewResult(
                status=ReviewStatus.REJECTED,
                application_id=application_id,
                application=updated,
            )

    def withdraw_application(self, application_id: int, adopter_id: int) -> ReviewResult:
        """Move a PENDING application to WITHDRAWN on behalf of its adopter."""
        with LogContext.bind(
            actor_id=str(adopter_id),
            application_id=str(application_id),
        ):
            try:
                require_positive_id("application_id", application_id)
                require_positive_id("adopter_id", adopter_id)
                with unit_of_work(self._session, "withdraw_application"):
                    application = self._applications.find_by_id(application_id, lock=True)
                    if application is None:
                        raise ApplicationNotFoundError(application_id)
                    if application.adopter_id != adopter_id:
                        raise AccessDeniedError(
                            adopter_id,
                            application.adopter_id,
                            WITHDRAW_APPLICATION,
                            owner="adopter",
                        )
                    if not application.is_pending:
                        raise ApplicationNotPendingError(
                            application_id, application.status.value,
                        )
                    if not self._applications.withdraw(application_id, adopter_id):
                        raise WriteNotAppliedError(
                            "AdoptionApplication", application_id, "withdraw_application",
                        )
                    updated = self._applications.get_by_id(application_id)
            except AdoptionKernelError as exc:
                return self._failed("withdraw_application", exc, application_id)

            logger.info("application_withdrawn", extra={"pet_id": updated.pet_id})
            return ReviewResult(
                status=ReviewStatus.WITHDRAWN,
                application_id=application_id,
                application=updated,
            )

    def _failed(
        self,
        operation: str,
        exc: AdoptionKernelError,
        application_id: object,
    ) -> ReviewResult:
        if isinstance(exc, AccessDeniedError):
            logger.warning(
                f"{operation}_access_denied",
                extra={"user_id": exc.user_id, "action": exc.action},
            )
        else:
            logger.info(
                f"{operation}_failed",
                extra={"code": exc.code, "category": exc.category.value},
            )
        return ReviewResult(
            status=ReviewStatus(exc.category.value),
            application_id=application_id,
            error=exc,
        )

    # Queries

    def application_by_id(self, application_id: int) -> ApplicationInfo:
        """
        Raises:
            InvalidIdentifierError: If application_id is not positive.
            ApplicationNotFoundError: If the application doesn't exist.
        """
        require_positive_id("application_id", application_id)
        return self._applications.get_by_id(application_id)

    def pending_applications(self) -> list[ApplicationInfo]:
        """The review queue: every PENDING application, oldest first."""
        return self._applications.list_pending()

    def applications_for_pet(self, pet_id: int) -> list[ApplicationInfo]:
        require_positive_id("pet_id", pet_id)
        return self._applications.list_by_pet(pet_id)

    def applications_by_adopter(self, adopter_id: int) -> list[ApplicationInfo]:
        require_positive_id("adopter_id", adopter_id)
        return self._applications.list_by_adopter(adopter_id)

    def pending_count_for_pet(self, pet_id: int) -> int:
        require_positive_id("pet_id", pet_id)
        return self._applications.count_pending_for_pet(pet_id)
