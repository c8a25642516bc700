"""Domain models for the adoption kernel."""

from adoption_kernel.models.adoption import Adoption
from adoption_kernel.models.application import (
    TERMINAL_APPLICATION_STATUSES,
    AdoptionApplication,
    ApplicationStatus,
)
from adoption_kernel.models.custodian import Custodian
from adoption_kernel.models.pet import FINALIZABLE_PET_STATUSES, Gender, Pet, PetStatus
from adoption_kernel.models.user import User, UserType

__all__ = [
    "Adoption",
    "AdoptionApplication",
    "ApplicationStatus",
    "Custodian",
    "FINALIZABLE_PET_STATUSES",
    "Gender",
    "Pet",
    "PetStatus",
    "TERMINAL_APPLICATION_STATUSES",
    "User",
    "UserType",
]
