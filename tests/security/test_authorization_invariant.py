"""
Authorization invariant: a finalization can only succeed when the reviewer
is the user operating the pet's custodian.

The guard is fuzzed in isolation against an in-memory custodian mapping,
then end to end against the database: any reviewer other than the
custodian's user gets ACCESS_DENIED and the committed state is untouched.
"""

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from adoption_kernel.exceptions import AccessDeniedError, ErrorCategory
from adoption_kernel.services.authorization_guard import (
    FINALIZE_ADOPTION,
    MANAGE_PETS,
    AuthorizationGuard,
)
from adoption_kernel.services.finalization_coordinator import FinalizationStatus
from adoption_kernel.stores.custodian_store import CustodianInfo


class _MappingCustodians:
    """Custodian lookup backed by a dict of user_id -> custodian_id."""

    def __init__(self, mapping: dict[int, int]):
        self._mapping = mapping

    def find_by_user(self, user_id: int) -> CustodianInfo | None:
        custodian_id = self._mapping.get(user_id)
        if custodian_id is None:
            return None
        return CustodianInfo(
            id=custodian_id,
            user_id=user_id,
            name=f"Shelter {custodian_id}",
            license_number=f"LIC-{custodian_id}",
            capacity=None,
            is_verified=True,
        )


ids = st.integers(min_value=1, max_value=10_000)


class TestGuardProperties:

    @given(mapping=st.dictionaries(ids, ids, max_size=20), custodian_id=ids, user_id=ids)
    def test_allows_exactly_the_mapped_user(self, mapping, custodian_id, user_id):
        guard = AuthorizationGuard(_MappingCustodians(mapping))
        allowed = mapping.get(user_id) == custodian_id

        assert guard.is_custodian(custodian_id, user_id) is allowed
        if allowed:
            guard.require_custodian(custodian_id, user_id)
        else:
            with pytest.raises(AccessDeniedError) as exc_info:
                guard.require_custodian(custodian_id, user_id)
            assert exc_info.value.user_id == user_id
            assert exc_info.value.owner_id == custodian_id
            assert exc_info.value.category == ErrorCategory.ACCESS_DENIED

    @given(custodian_id=ids)
    def test_user_id_equal_to_custodian_id_is_not_enough(self, custodian_id):
        """The mapping decides, not numeric coincidence."""
        guard = AuthorizationGuard(_MappingCustodians({custodian_id: custodian_id + 1}))
        with pytest.raises(AccessDeniedError):
            guard.require_custodian(custodian_id, custodian_id)

    def test_user_without_custodian_denied(self):
        guard = AuthorizationGuard(_MappingCustodians({}))
        with pytest.raises(AccessDeniedError) as exc_info:
            guard.require_custodian(3, 3, MANAGE_PETS)
        assert exc_info.value.action == MANAGE_PETS

    def test_default_action_is_finalization(self):
        guard = AuthorizationGuard(_MappingCustodians({}))
        with pytest.raises(AccessDeniedError) as exc_info:
            guard.require_custodian(3, 4)
        assert exc_info.value.action == FINALIZE_ADOPTION


class TestFinalizationAuthorization:

    @settings(
        max_examples=25,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    @given(reviewer_id=ids)
    def test_non_custodian_reviewers_never_write(
        self, reviewer_id, scenario, coordinator, committed_state,
    ):
        if reviewer_id == scenario.shelter_user_id:
            return
        before = committed_state()

        result = coordinator.finalize_adoption(
            scenario.pet_id,
            scenario.application_id,
            scenario.decision_date,
            "looks good",
            reviewer_id,
        )

        assert result.status == FinalizationStatus.ACCESS_DENIED
        assert isinstance(result.error, AccessDeniedError)
        assert committed_state() == before

    def test_admin_has_no_override(self, scenario, coordinator, committed_state):
        before = committed_state()
        result = coordinator.finalize_adoption(
            scenario.pet_id,
            scenario.application_id,
            scenario.decision_date,
            None,
            scenario.admin_user_id,
        )
        assert result.status == FinalizationStatus.ACCESS_DENIED
        assert committed_state() == before

    def test_other_shelter_denied(self, scenario, coordinator, committed_state):
        before = committed_state()
        result = coordinator.finalize_adoption(
            scenario.pet_id,
            scenario.application_id,
            scenario.decision_date,
            None,
            scenario.other_shelter_user_id,
        )
        assert result.status == FinalizationStatus.ACCESS_DENIED
        assert result.error.owner_id == scenario.custodian_id
        assert committed_state() == before

    def test_unauthorized_cannot_discover_applications(self, scenario, coordinator):
        """Denial comes before the application lookup."""
        result = coordinator.finalize_adoption(
            scenario.pet_id, 999, scenario.decision_date, None, 5,
        )
        assert result.status == FinalizationStatus.ACCESS_DENIED
