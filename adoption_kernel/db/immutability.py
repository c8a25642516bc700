"""
ORM-Level Immutability Enforcement.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity               | When Immutable                  | Why
---------------------|---------------------------------|---------------------------
Adoption             | ALWAYS (from creation)          | Permanent audit trail
Pet                  | DELETE once status = adopted    | Adoption rows reference it
AdoptionApplication  | status once terminal            | Decisions are final

===============================================================================
HOW IT WORKS
===============================================================================

SQLAlchemy fires mapper events before UPDATE/DELETE statements produced by a
flush reach the database.  The listeners below inspect attribute history and
raise ImmutabilityViolationError, which aborts the flush; the enclosing unit
of work then rolls back.

Store mutations issue single conditional UPDATE statements (see
stores/pet_store.py, stores/application_store.py) whose WHERE clauses encode
the same rules, so both paths agree.

===============================================================================
USAGE
===============================================================================

    from adoption_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # once at startup

Tests that must bypass the rules call unregister_immutability_listeners()
and re-register afterwards.
"""

from sqlalchemy import event
from sqlalchemy.orm.attributes import get_history

from adoption_kernel.exceptions import ImmutabilityViolationError
from adoption_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _blocked(entity_type: str, entity_id, operation: str, reason: str) -> ImmutabilityViolationError:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
            "reason": reason,
        },
    )
    return ImmutabilityViolationError(entity_type, str(entity_id), reason)


def _check_adoption_update(mapper, connection, target):
    """Adoption rows are append-only."""
    raise _blocked("Adoption", target.id, "UPDATE", "adoption records are append-only")


def _check_adoption_delete(mapper, connection, target):
    """Adoption rows are never deleted."""
    raise _blocked("Adoption", target.id, "DELETE", "adoption records are append-only")


def _check_pet_delete(mapper, connection, target):
    """An adopted pet is referenced by its adoption record."""
    from adoption_kernel.models.pet import PetStatus

    # Status as loaded from the database, not a pending in-memory change
    history = get_history(target, "status")
    persisted = history.deleted[0] if history.deleted else target.status
    if persisted == PetStatus.ADOPTED.value:
        raise _blocked("Pet", target.id, "DELETE", "adopted pets cannot be deleted")


def _check_application_update(mapper, connection, target):
    """Once decided or withdrawn, an application's status is frozen."""
    from adoption_kernel.models.application import TERMINAL_APPLICATION_STATUSES

    history = get_history(target, "status")
    if not history.deleted:
        return
    previous = history.deleted[0]
    if previous in {s.value for s in TERMINAL_APPLICATION_STATUSES}:
        raise _blocked(
            "AdoptionApplication",
            target.id,
            "UPDATE",
            f"status {previous} is terminal",
        )


_LISTENERS = None


def _listener_table():
    from adoption_kernel.models.adoption import Adoption
    from adoption_kernel.models.application import AdoptionApplication
    from adoption_kernel.models.pet import Pet

    return (
        (Adoption, "before_update", _check_adoption_update),
        (Adoption, "before_delete", _check_adoption_delete),
        (Pet, "before_delete", _check_pet_delete),
        (AdoptionApplication, "before_update", _check_application_update),
    )


def register_immutability_listeners() -> None:
    """Install all immutability listeners (idempotent)."""
    global _LISTENERS
    if _LISTENERS is None:
        _LISTENERS = _listener_table()
    for target, name, fn in _LISTENERS:
        if not event.contains(target, name, fn):
            event.listen(target, name, fn)


def unregister_immutability_listeners() -> None:
    """Remove all immutability listeners. FOR TESTING ONLY."""
    if _LISTENERS is None:
        return
    for target, name, fn in _LISTENERS:
        if event.contains(target, name, fn):
            event.remove(target, name, fn)
