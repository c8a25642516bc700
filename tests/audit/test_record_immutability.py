"""
ORM immutability listeners.

Adoption rows are append-only, adopted pets cannot be deleted and a
decided application keeps its status.  The listeners fire on flush, so a
direct ORM edit is blocked even when it bypasses the stores.
"""

import pytest

from adoption_kernel.exceptions import ImmutabilityViolationError
from adoption_kernel.models import Adoption, AdoptionApplication, Pet
from adoption_kernel.models.application import ApplicationStatus
from adoption_kernel.stores import PetStore


@pytest.fixture
def finalized(scenario, coordinator):
    result = coordinator.finalize_adoption(
        scenario.pet_id, scenario.application_id, scenario.decision_date,
        None, scenario.shelter_user_id,
    )
    assert result.is_success
    return result


class TestAdoptionAppendOnly:

    def test_update_blocked(self, finalized, session, committed_state):
        before = committed_state()
        adoption = session.get(Adoption, finalized.adoption.id)
        adoption.contract_signed = False

        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        session.rollback()

        assert exc_info.value.entity_type == "Adoption"
        assert committed_state() == before

    def test_delete_blocked(self, finalized, session, adoption_count):
        session.delete(session.get(Adoption, finalized.adoption.id))

        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

        assert adoption_count(finalized.pet_id) == 1

    def test_violation_logged(self, finalized, session, captured_logs):
        session.delete(session.get(Adoption, finalized.adoption.id))
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

        blocked = [r for r in captured_logs() if r["message"] == "immutability_violation_blocked"]
        assert blocked[0]["operation"] == "DELETE"
        assert blocked[0]["entity_id"] == str(finalized.adoption.id)


class TestPetAndApplicationProtection:

    def test_adopted_pet_delete_blocked(self, finalized, session, scenario):
        with pytest.raises(ImmutabilityViolationError):
            PetStore(session).delete(scenario.pet_id)
        session.rollback()

        assert session.get(Pet, scenario.pet_id) is not None

    def test_available_pet_delete_allowed(self, scenario, session):
        assert PetStore(session).delete(scenario.other_pet_id) is True
        session.commit()
        assert session.get(Pet, scenario.other_pet_id) is None

    def test_approved_application_status_frozen(self, finalized, session, scenario):
        app = session.get(AdoptionApplication, scenario.application_id)
        app.status = ApplicationStatus.PENDING.value

        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

    def test_pending_application_notes_editable(self, scenario, session):
        app = session.get(AdoptionApplication, scenario.application_id)
        app.application_text = "Updated: we also have a fenced garden."
        session.commit()

        session.expire_all()
        assert session.get(AdoptionApplication, scenario.application_id).application_text.startswith(
            "Updated"
        )
