"""Services for the adoption kernel (write side)."""

from adoption_kernel.services.application_review_service import (
    ApplicationReviewService,
    ReviewResult,
    ReviewStatus,
)
from adoption_kernel.services.authorization_guard import AuthorizationGuard
from adoption_kernel.services.finalization_coordinator import (
    AdoptionFinalizationCoordinator,
    FinalizationResult,
    FinalizationStatus,
)
from adoption_kernel.services.pet_service import PetService
from adoption_kernel.services.submission_gate import (
    ApplicationSubmissionGate,
    SubmissionResult,
    SubmissionStatus,
)

__all__ = [
    "AdoptionFinalizationCoordinator",
    "ApplicationReviewService",
    "ApplicationSubmissionGate",
    "AuthorizationGuard",
    "FinalizationResult",
    "FinalizationStatus",
    "PetService",
    "ReviewResult",
    "ReviewStatus",
    "SubmissionResult",
    "SubmissionStatus",
]
