"""
Tests for AdoptionFinalizationCoordinator.

Covers the four observable outcomes of finalize_adoption():
- success: pet ADOPTED, application APPROVED, one adoption record
- access denied before any write
- not found (pet, or application after authorization)
- invalid argument / invalid state preconditions

and the logging contract around them.  Atomicity under injected faults is
in tests/crash; concurrent finalization is in tests/concurrency.
"""

from datetime import date, datetime

import pytest

from adoption_kernel.exceptions import (
    AccessDeniedError,
    ApplicationNotFoundError,
    ApplicationNotPendingError,
    ApplicationPetMismatchError,
    InvalidFieldError,
    InvalidIdentifierError,
    PetNotAvailableError,
    PetNotFoundError,
)
from adoption_kernel.models.application import ApplicationStatus
from adoption_kernel.models.pet import PetStatus
from adoption_kernel.services.finalization_coordinator import (
    FinalizationResult,
    FinalizationStatus,
)
from adoption_kernel.stores import AdoptionStore, ApplicationStore, PetStore


def _finalize(coordinator, scenario, **overrides):
    args = {
        "pet_id": scenario.pet_id,
        "application_id": scenario.application_id,
        "decision_date": scenario.decision_date,
        "notes": "Home visit went well",
        "reviewer_id": scenario.shelter_user_id,
    }
    args.update(overrides)
    return coordinator.finalize_adoption(**args)


class TestSuccessfulFinalization:
    """Pet 7 / application 42 / reviewer 3 / 2024-01-10."""

    def test_returns_finalized_with_adoption(self, scenario, coordinator):
        result = _finalize(coordinator, scenario)

        assert isinstance(result, FinalizationResult)
        assert result.status == FinalizationStatus.FINALIZED
        assert result.is_success
        assert result.error is None
        assert result.pet_id == scenario.pet_id
        assert result.application_id == scenario.application_id
        assert result.adoption.pet_id == scenario.pet_id
        assert result.adoption.adopter_id == scenario.adopter_id
        assert result.adoption.contract_signed is True

    def test_all_three_entities_committed(
        self, scenario, coordinator, session_factory, deterministic_clock,
    ):
        _finalize(coordinator, scenario)

        with session_factory() as fresh:
            pet = PetStore(fresh).get_by_id(scenario.pet_id)
            app = ApplicationStore(fresh).get_by_id(scenario.application_id)
            adoptions = AdoptionStore(fresh).list_by_pet(scenario.pet_id)

        assert pet.status == PetStatus.ADOPTED
        assert pet.adoption_date == date(2024, 1, 10)

        assert app.status == ApplicationStatus.APPROVED
        assert app.reviewed_by == scenario.shelter_user_id
        assert app.review_notes == "Home visit went well"
        assert app.decided_at is not None

        assert len(adoptions) == 1
        assert adoptions[0].adopter_id == scenario.adopter_id
        assert adoptions[0].contract_signed is True
        assert adoptions[0].adoption_date.date() == date(2024, 1, 10)

    def test_other_pets_untouched(self, scenario, coordinator, pet_service):
        _finalize(coordinator, scenario)
        assert pet_service.get_pet(scenario.other_pet_id).status == PetStatus.AVAILABLE

    def test_pending_pet_is_finalizable(self, scenario, coordinator, session):
        PetStore(session).update_status(scenario.pet_id, PetStatus.PENDING, [PetStatus.AVAILABLE])
        session.commit()

        assert _finalize(coordinator, scenario).status == FinalizationStatus.FINALIZED

    def test_datetime_decision_date_reduced_to_date(self, scenario, coordinator):
        result = _finalize(coordinator, scenario, decision_date=datetime(2024, 1, 10, 15, 45))
        assert result.is_success
        assert result.adoption.adoption_date.date() == date(2024, 1, 10)

    def test_notes_optional(self, scenario, coordinator):
        assert _finalize(coordinator, scenario, notes=None).is_success

    def test_session_left_without_transaction(self, scenario, coordinator, session):
        _finalize(coordinator, scenario)
        assert not session.in_transaction()


class TestAccessDenied:
    """Same as the success case but reviewer 5."""

    def test_denied_and_nothing_written(self, scenario, coordinator, committed_state):
        before = committed_state()

        result = _finalize(coordinator, scenario, reviewer_id=scenario.other_shelter_user_id)

        assert result.status == FinalizationStatus.ACCESS_DENIED
        assert not result.is_success
        assert isinstance(result.error, AccessDeniedError)
        assert result.adoption is None
        assert committed_state() == before

    def test_pet_and_application_unchanged(self, scenario, coordinator, session_factory):
        _finalize(coordinator, scenario, reviewer_id=scenario.other_shelter_user_id)

        with session_factory() as fresh:
            assert PetStore(fresh).get_by_id(scenario.pet_id).status == PetStatus.AVAILABLE
            assert ApplicationStore(fresh).get_by_id(
                scenario.application_id,
            ).status == ApplicationStatus.PENDING
            assert AdoptionStore(fresh).count_for_pet(scenario.pet_id) == 0

    def test_adopter_cannot_approve_own_application(self, scenario, coordinator):
        result = _finalize(coordinator, scenario, reviewer_id=scenario.adopter_id)
        assert result.status == FinalizationStatus.ACCESS_DENIED


class TestNotFound:

    def test_missing_application(self, scenario, coordinator, committed_state):
        before = committed_state()

        result = _finalize(coordinator, scenario, application_id=999)

        assert result.status == FinalizationStatus.NOT_FOUND
        assert isinstance(result.error, ApplicationNotFoundError)
        assert result.error.application_id == 999
        assert committed_state() == before

    def test_missing_pet(self, scenario, coordinator, committed_state):
        before = committed_state()

        result = _finalize(coordinator, scenario, pet_id=404)

        assert result.status == FinalizationStatus.NOT_FOUND
        assert isinstance(result.error, PetNotFoundError)
        assert committed_state() == before


class TestInvalidArgument:

    @pytest.mark.parametrize("field", ["pet_id", "application_id", "reviewer_id"])
    @pytest.mark.parametrize("value", [0, -1, None, "7", 7.0, True, 2**63, 2**70])
    def test_bad_identifiers(self, scenario, coordinator, committed_state, field, value):
        before = committed_state()

        result = _finalize(coordinator, scenario, **{field: value})

        assert result.status == FinalizationStatus.INVALID_ARGUMENT
        assert isinstance(result.error, InvalidIdentifierError)
        assert result.error.field == field
        assert committed_state() == before

    @pytest.mark.parametrize("value", [None, "2024-01-10", 20240110])
    def test_bad_decision_date(self, scenario, coordinator, value):
        result = _finalize(coordinator, scenario, decision_date=value)

        assert result.status == FinalizationStatus.INVALID_ARGUMENT
        assert isinstance(result.error, InvalidFieldError)
        assert result.error.field == "decision_date"

    def test_identifiers_checked_before_lookup(self, coordinator):
        """Argument errors need no database rows at all."""
        result = coordinator.finalize_adoption(-1, 42, date(2024, 1, 10), None, 3)
        assert result.status == FinalizationStatus.INVALID_ARGUMENT


class TestInvalidState:

    def test_already_finalized(self, scenario, coordinator, committed_state):
        assert _finalize(coordinator, scenario).is_success
        after_first = committed_state()

        result = _finalize(coordinator, scenario)

        assert result.status == FinalizationStatus.INVALID_STATE
        assert isinstance(result.error, ApplicationNotPendingError)
        assert committed_state() == after_first

    def test_rejected_application(self, scenario, coordinator, review_service, committed_state):
        review_service.reject_application(
            scenario.application_id, "not a fit", scenario.shelter_user_id,
        )
        before = committed_state()

        result = _finalize(coordinator, scenario)

        assert result.status == FinalizationStatus.INVALID_STATE
        assert isinstance(result.error, ApplicationNotPendingError)
        assert result.error.status == "rejected"
        assert committed_state() == before

    def test_application_for_another_pet(
        self, scenario, coordinator, submission_gate, committed_state,
    ):
        from adoption_kernel.domain.dtos import ApplicationDraft

        other = submission_gate.submit_application(
            ApplicationDraft(pet_id=scenario.other_pet_id, adopter_id=scenario.adopter_id),
        ).application
        before = committed_state()

        result = _finalize(coordinator, scenario, application_id=other.id)

        assert result.status == FinalizationStatus.INVALID_STATE
        assert isinstance(result.error, ApplicationPetMismatchError)
        assert result.error.actual_pet_id == scenario.other_pet_id
        assert committed_state() == before

    def test_archived_pet(self, scenario, coordinator, pet_service, committed_state):
        pet_service.archive_pet(scenario.pet_id, scenario.shelter_user_id)
        before = committed_state()

        result = _finalize(coordinator, scenario)

        assert result.status == FinalizationStatus.INVALID_STATE
        assert isinstance(result.error, PetNotAvailableError)
        assert result.error.status == "archived"
        assert committed_state() == before


class TestFinalizationLogging:

    def test_success_events(self, scenario, coordinator, captured_logs):
        result = _finalize(coordinator, scenario)

        logs = captured_logs()
        messages = [r["message"] for r in logs]
        assert "finalization_started" in messages
        assert "finalization_completed" in messages

        completed = next(r for r in logs if r["message"] == "finalization_completed")
        assert completed["adoption_id"] == result.adoption.id
        assert completed["pet_id"] == str(scenario.pet_id)
        assert completed["application_id"] == str(scenario.application_id)
        assert completed["actor_id"] == str(scenario.shelter_user_id)
        assert "correlation_id" in completed
        assert completed["duration_ms"] >= 0

    def test_access_denied_is_a_distinct_warning(self, scenario, coordinator, captured_logs):
        _finalize(coordinator, scenario, reviewer_id=scenario.other_shelter_user_id)

        denied = [r for r in captured_logs() if r["message"] == "finalization_access_denied"]
        assert len(denied) == 1
        assert denied[0]["level"] == "WARNING"
        assert denied[0]["reviewer_id"] == scenario.other_shelter_user_id
        assert denied[0]["custodian_id"] == scenario.custodian_id

    def test_precondition_failure_logged_as_rejection(self, scenario, coordinator, captured_logs):
        _finalize(coordinator, scenario, application_id=999)

        rejected = [r for r in captured_logs() if r["message"] == "finalization_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["code"] == "APPLICATION_NOT_FOUND"
        assert rejected[0]["category"] == "not_found"

    def test_context_does_not_leak(self, scenario, coordinator):
        from adoption_kernel.logging_config import LogContext

        _finalize(coordinator, scenario)
        assert LogContext.get_all() == {}
