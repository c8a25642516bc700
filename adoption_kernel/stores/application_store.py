"""
Store for adoption applications.

Responsibility:
    Creation, point reads, per-pet / per-adopter / per-status listings, and
    the conditional decision mutations.

Invariants enforced:
    - ``record_decision`` and ``withdraw`` only act on PENDING rows; a
      terminal status is never overwritten.
    - ``record_decision`` writes status, notes, reviewer and decision time in
      one statement; ``withdraw`` leaves the decision fields NULL.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, update

from adoption_kernel.exceptions import ApplicationNotFoundError
from adoption_kernel.logging_config import get_logger
from adoption_kernel.models.application import AdoptionApplication, ApplicationStatus
from adoption_kernel.stores.base import BaseStore

logger = get_logger("stores.application")

DECISION_STATUSES = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED})


@dataclass(frozen=True)
class ApplicationInfo:
    """Immutable DTO for adoption application data."""

    id: int
    pet_id: int
    adopter_id: int
    application_date: datetime
    status: ApplicationStatus
    application_text: str | None
    reason_for_adoption: str | None
    household_members: int | None
    has_yard: bool | None
    previous_pet_experience: str | None
    decided_at: datetime | None
    review_notes: str | None
    reviewed_by: int | None

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.PENDING


class ApplicationStore(BaseStore[AdoptionApplication]):
    """Persistence operations for adoption applications."""

    model = AdoptionApplication

    def _to_dto(self, app: AdoptionApplication) -> ApplicationInfo:
        return ApplicationInfo(
            id=app.id,
            pet_id=app.pet_id,
            adopter_id=app.adopter_id,
            application_date=app.application_date,
            status=ApplicationStatus(app.status),
            application_text=app.application_text,
            reason_for_adoption=app.reason_for_adoption,
            household_members=app.household_members,
            has_yard=app.has_yard,
            previous_pet_experience=app.previous_pet_experience,
            decided_at=app.decided_at,
            review_notes=app.review_notes,
            reviewed_by=app.reviewed_by,
        )

    def _load(self, application_id: int, lock: bool = False) -> AdoptionApplication | None:
        if not lock:
            return self.session.get(AdoptionApplication, application_id)
        stmt = (
            select(AdoptionApplication)
            .where(AdoptionApplication.id == application_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _list(self, *criteria, oldest_first: bool = False) -> list[ApplicationInfo]:
        order = AdoptionApplication.application_date
        stmt = (
            select(AdoptionApplication)
            .where(*criteria)
            .order_by(
                order.asc() if oldest_first else order.desc(),
                AdoptionApplication.id,
            )
        )
        return [self._to_dto(a) for a in self.session.execute(stmt).scalars()]

    def create(
        self,
        pet_id: int,
        adopter_id: int,
        application_date: datetime,
        application_text: str | None = None,
        reason_for_adoption: str | None = None,
        household_members: int | None = None,
        has_yard: bool | None = None,
        previous_pet_experience: str | None = None,
        application_id: int | None = None,
    ) -> ApplicationInfo:
        """
        Insert a PENDING application.

        Raises:
            IntegrityError: On a second application by the same adopter for
                the same pet, or unknown pet/adopter ids.
        """
        app = AdoptionApplication(
            id=application_id,
            pet_id=pet_id,
            adopter_id=adopter_id,
            application_date=application_date,
            status=ApplicationStatus.PENDING.value,
            application_text=application_text,
            reason_for_adoption=reason_for_adoption,
            household_members=household_members,
            has_yard=has_yard,
            previous_pet_experience=previous_pet_experience,
        )
        self.session.add(app)
        self.session.flush()
        return self._to_dto(app)

    def find_by_id(self, application_id: int, lock: bool = False) -> ApplicationInfo | None:
        app = self._load(application_id, lock=lock)
        return self._to_dto(app) if app else None

    def get_by_id(self, application_id: int, lock: bool = False) -> ApplicationInfo:
        """
        Raises:
            ApplicationNotFoundError: If the application doesn't exist.
        """
        app = self._load(application_id, lock=lock)
        if app is None:
            raise ApplicationNotFoundError(application_id)
        return self._to_dto(app)

    def find_for_pet_and_adopter(self, pet_id: int, adopter_id: int) -> ApplicationInfo | None:
        stmt = select(AdoptionApplication).where(
            AdoptionApplication.pet_id == pet_id,
            AdoptionApplication.adopter_id == adopter_id,
        )
        app = self.session.execute(stmt).scalar_one_or_none()
        return self._to_dto(app) if app else None

    def list_by_pet(self, pet_id: int) -> list[ApplicationInfo]:
        """Applications for a pet, newest first."""
        return self._list(AdoptionApplication.pet_id == pet_id)

    def list_by_adopter(self, adopter_id: int) -> list[ApplicationInfo]:
        """Applications filed by an adopter, newest first."""
        return self._list(AdoptionApplication.adopter_id == adopter_id)

    def list_by_status(self, status: ApplicationStatus) -> list[ApplicationInfo]:
        return self._list(AdoptionApplication.status == status.value)

    def list_pending(self) -> list[ApplicationInfo]:
        """Pending applications, oldest first (review queue order)."""
        return self._list(
            AdoptionApplication.status == ApplicationStatus.PENDING.value,
            oldest_first=True,
        )

    def count_pending_for_pet(self, pet_id: int) -> int:
        stmt = select(func.count(AdoptionApplication.id)).where(
            AdoptionApplication.pet_id == pet_id,
            AdoptionApplication.status == ApplicationStatus.PENDING.value,
        )
        return self.session.execute(stmt).scalar_one()

    def record_decision(
        self,
        application_id: int,
        status: ApplicationStatus,
        notes: str | None,
        reviewer_id: int,
        decided_at: datetime,
    ) -> bool:
        """
        Conditionally approve or reject a PENDING application.

        Returns:
            True iff exactly one PENDING row now carries ``status``,
            ``notes``, ``reviewer_id`` and ``decided_at``.
        """
        if status not in DECISION_STATUSES:
            raise ValueError(f"not a decision status: {status}")
        stmt = (
            update(AdoptionApplication)
            .where(
                AdoptionApplication.id == application_id,
                AdoptionApplication.status == ApplicationStatus.PENDING.value,
            )
            .values(
                status=status.value,
                review_notes=notes,
                reviewed_by=reviewer_id,
                decided_at=decided_at,
            )
            .execution_options(synchronize_session=False)
        )
        affected = self.session.execute(stmt).rowcount
        self._expire_cached(application_id)
        logger.debug(
            "application_decision_written",
            extra={
                "application_id": application_id,
                "status": status.value,
                "rows_affected": affected,
            },
        )
        return affected == 1

    def withdraw(self, application_id: int, adopter_id: int) -> bool:
        """
        Conditionally withdraw a PENDING application filed by ``adopter_id``.

        Returns:
            True iff exactly one row moved to WITHDRAWN.
        """
        stmt = (
            update(AdoptionApplication)
            .where(
                AdoptionApplication.id == application_id,
                AdoptionApplication.adopter_id == adopter_id,
                AdoptionApplication.status == ApplicationStatus.PENDING.value,
            )
            .values(status=ApplicationStatus.WITHDRAWN.value)
            .execution_options(synchronize_session=False)
        )
        affected = self.session.execute(stmt).rowcount
        self._expire_cached(application_id)
        return affected == 1
