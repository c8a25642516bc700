"""
DTOs -- Caller-supplied input for the write-side services.

Responsibility:
    Immutable drafts that the HTTP layer builds from a form and hands to a
    service: ApplicationDraft (submission gate) and PetDraft (intake).

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Only the status/gender enums are
    shared with the models; no ORM instance crosses in.  The persisted views
    (PetInfo, ApplicationInfo, ...) live next to their stores.

Invariants enforced:
    - Drafts are frozen; services validate them and never mutate them.
    - Drafts carry no status and no timestamps.  Initial status and the
      application date are decided by the service, not by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from adoption_kernel.models.pet import Gender


@dataclass(frozen=True)
class ApplicationDraft:
    """An adopter's not-yet-submitted application for one pet."""

    pet_id: int
    adopter_id: int
    application_text: str | None = None
    reason_for_adoption: str | None = None
    household_members: int | None = None
    has_yard: bool | None = None
    previous_pet_experience: str | None = None


@dataclass(frozen=True)
class PetDraft:
    """A pet arriving at a custodian's intake desk."""

    custodian_id: int
    name: str
    species: str
    breed: str | None = None
    age_years: int | None = None
    age_months: int | None = None
    gender: Gender = Gender.UNKNOWN
    description: str | None = None
    adoption_fee: Decimal | None = None
    intake_date: date | None = None
