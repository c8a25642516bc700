"""
AuthorizationGuard -- custodian-ownership rule.

Responsibility:
    Decides whether a user may act on behalf of the custodian that holds a
    pet (finalize or reject its adoptions, register or archive it).

Invariants enforced:
    - Allow iff the user operates the pet's custodian, resolved through the
      custodians.user_id mapping.  A user id is never compared to a
      custodian id.
    - There is no administrator override.
    - Denial is an AccessDeniedError, never a boolean, so it cannot be
      ignored by accident.

Side effects:
    None beyond one read of the custodian mapping.  Logging of denials is
    the caller's responsibility (it knows which operation was refused).
"""

from __future__ import annotations

from adoption_kernel.exceptions import AccessDeniedError
from adoption_kernel.stores.custodian_store import CustodianStore

FINALIZE_ADOPTION = "finalize adoptions"
REJECT_APPLICATION = "reject applications"
MANAGE_PETS = "manage pets"


class AuthorizationGuard:
    """Custodian-ownership authorization."""

    def __init__(self, custodians: CustodianStore):
        self._custodians = custodians

    def require_custodian(
        self,
        custodian_id: int,
        user_id: int,
        action: str = FINALIZE_ADOPTION,
    ) -> None:
        """
        Raise unless ``user_id`` operates custodian ``custodian_id``.

        Raises:
            AccessDeniedError: On any mismatch, including users that operate
                no custodian at all.
        """
        custodian = self._custodians.find_by_user(user_id)
        if custodian is None or custodian.id != custodian_id:
            raise AccessDeniedError(user_id, custodian_id, action)

    def is_custodian(self, custodian_id: int, user_id: int) -> bool:
        """Non-raising form for display logic (e.g. showing an approve button)."""
        custodian = self._custodians.find_by_user(user_id)
        return custodian is not None and custodian.id == custodian_id
