"""
Typed Exception Hierarchy for the Adoption Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the HTTP handler layer) must map every failure of the core to a
response without parsing message strings.  Every error therefore has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. A CATEGORY class attribute (one of five ``ErrorCategory`` members)
  4. Structured DATA as instance attributes (pet_id, reviewer_id, ...)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    AdoptionKernelError (base)
    |
    +-- InvalidArgumentError                  [INVALID_ARGUMENT]
    |   +-- InvalidIdentifierError
    |   +-- InvalidFieldError
    |
    +-- NotFoundError                         [NOT_FOUND]
    |   +-- PetNotFoundError
    |   +-- ApplicationNotFoundError
    |   +-- CustodianNotFoundError
    |   +-- UserNotFoundError
    |
    +-- AccessDeniedError                     [ACCESS_DENIED]
    |
    +-- InvalidStateError                     [INVALID_STATE]
    |   +-- PetNotAvailableError
    |   +-- PetAdoptedError
    |   +-- ApplicationNotPendingError
    |   +-- ApplicationPetMismatchError
    |   +-- DuplicateApplicationError
    |   +-- ImmutabilityViolationError
    |
    +-- StorageFailureError                   [STORAGE_FAILURE]
        +-- WriteNotAppliedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category         | Code                      | When Raised
-----------------|---------------------------|-----------------------------------
INVALID_ARGUMENT | INVALID_IDENTIFIER        | Identifier missing or not positive
                 | INVALID_FIELD             | Field value fails validation
NOT_FOUND        | PET_NOT_FOUND             | Pet id does not exist
                 | APPLICATION_NOT_FOUND     | Application id does not exist
                 | CUSTODIAN_NOT_FOUND       | Custodian id does not exist
                 | USER_NOT_FOUND            | User id does not exist
ACCESS_DENIED    | ACCESS_DENIED             | Actor does not own the resource
INVALID_STATE    | PET_NOT_AVAILABLE         | Pet not AVAILABLE for the operation
                 | PET_ADOPTED               | Operation forbidden on ADOPTED pet
                 | APPLICATION_NOT_PENDING   | Application already decided
                 | APPLICATION_PET_MISMATCH  | Application filed for another pet
                 | DUPLICATE_APPLICATION     | Adopter already applied for pet
                 | IMMUTABILITY_VIOLATION    | Modifying an append-only record
STORAGE_FAILURE  | STORAGE_FAILURE           | Store rejected a write / commit
                 | WRITE_NOT_APPLIED         | Conditional write hit zero rows

===============================================================================
HANDLING PATTERNS
===============================================================================

Services return tagged results; the exception instance rides along on the
result so the caller can still branch on type:

    result = coordinator.finalize_adoption(...)
    if result.status is FinalizationStatus.ACCESS_DENIED:
        return forbidden(result.error.code)

Code that talks to the stores directly catches by category base class:

    try:
        pets.get_by_id(pet_id)
    except NotFoundError as e:
        return not_found(e.code)
"""

from enum import Enum


class ErrorCategory(str, Enum):
    """The five caller-visible failure categories."""

    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_STATE = "invalid_state"
    STORAGE_FAILURE = "storage_failure"


class AdoptionKernelError(Exception):
    """
    Base exception for all adoption kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification and inherit a `category`.
    """

    code: str = "ADOPTION_KERNEL_ERROR"
    category: ErrorCategory = ErrorCategory.STORAGE_FAILURE


# Invalid argument


class InvalidArgumentError(AdoptionKernelError):
    """Base exception for malformed caller input."""

    code: str = "INVALID_ARGUMENT"
    category: ErrorCategory = ErrorCategory.INVALID_ARGUMENT


class InvalidIdentifierError(InvalidArgumentError):
    """An identifier is missing, not an integer, or not positive."""

    code: str = "INVALID_IDENTIFIER"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a positive integer, got {value!r}")


class InvalidFieldError(InvalidArgumentError):
    """A field value (date, name, age, fee, ...) failed validation."""

    code: str = "INVALID_FIELD"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


# Not found


class NotFoundError(AdoptionKernelError):
    """Base exception for references to entities that do not exist."""

    code: str = "NOT_FOUND"
    category: ErrorCategory = ErrorCategory.NOT_FOUND


class PetNotFoundError(NotFoundError):
    """Pet with given ID was not found."""

    code: str = "PET_NOT_FOUND"

    def __init__(self, pet_id: int):
        self.pet_id = pet_id
        super().__init__(f"Pet not found: {pet_id}")


class ApplicationNotFoundError(NotFoundError):
    """Adoption application with given ID was not found."""

    code: str = "APPLICATION_NOT_FOUND"

    def __init__(self, application_id: int):
        self.application_id = application_id
        super().__init__(f"Application not found: {application_id}")


class CustodianNotFoundError(NotFoundError):
    """Custodian (shelter) with given ID was not found."""

    code: str = "CUSTODIAN_NOT_FOUND"

    def __init__(self, custodian_id: int):
        self.custodian_id = custodian_id
        super().__init__(f"Custodian not found: {custodian_id}")


class UserNotFoundError(NotFoundError):
    """User with given ID was not found."""

    code: str = "USER_NOT_FOUND"

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


# Access denied


class AccessDeniedError(AdoptionKernelError):
    """
    Acting user does not own the resource (the pet's custodian, or the
    adopter of an application).

    Security relevant: always logged as a distinct event and never
    accompanied by a write.
    """

    code: str = "ACCESS_DENIED"
    category: ErrorCategory = ErrorCategory.ACCESS_DENIED

    def __init__(self, user_id: int, owner_id: int, action: str, owner: str = "custodian"):
        self.user_id = user_id
        self.owner_id = owner_id
        self.owner = owner
        self.action = action
        super().__init__(
            f"Access denied: user {user_id} may not {action} of {owner} {owner_id}"
        )


# Invalid state


class InvalidStateError(AdoptionKernelError):
    """Base exception for business-rule violations."""

    code: str = "INVALID_STATE"
    category: ErrorCategory = ErrorCategory.INVALID_STATE


class PetNotAvailableError(InvalidStateError):
    """Pet is not in a status that allows the requested operation."""

    code: str = "PET_NOT_AVAILABLE"

    def __init__(self, pet_id: int, status: str):
        self.pet_id = pet_id
        self.status = status
        super().__init__(f"Pet {pet_id} is not available for adoption (status={status})")


class PetAdoptedError(InvalidStateError):
    """Operation is forbidden because the pet has been adopted."""

    code: str = "PET_ADOPTED"

    def __init__(self, pet_id: int, operation: str):
        self.pet_id = pet_id
        self.operation = operation
        super().__init__(f"Cannot {operation} pet {pet_id}: pet has been adopted")


class ApplicationNotPendingError(InvalidStateError):
    """Application has already reached a terminal status."""

    code: str = "APPLICATION_NOT_PENDING"

    def __init__(self, application_id: int, status: str):
        self.application_id = application_id
        self.status = status
        super().__init__(
            f"Application {application_id} is not pending (status={status})"
        )


class ApplicationPetMismatchError(InvalidStateError):
    """Application was filed for a different pet than the one being finalized."""

    code: str = "APPLICATION_PET_MISMATCH"

    def __init__(self, application_id: int, expected_pet_id: int, actual_pet_id: int):
        self.application_id = application_id
        self.expected_pet_id = expected_pet_id
        self.actual_pet_id = actual_pet_id
        super().__init__(
            f"Application {application_id} is for pet {actual_pet_id}, "
            f"not pet {expected_pet_id}"
        )


class DuplicateApplicationError(InvalidStateError):
    """Adopter already filed an application for this pet."""

    code: str = "DUPLICATE_APPLICATION"

    def __init__(self, pet_id: int, adopter_id: int):
        self.pet_id = pet_id
        self.adopter_id = adopter_id
        super().__init__(
            f"Adopter {adopter_id} already has an application for pet {pet_id}"
        )


class ImmutabilityViolationError(InvalidStateError):
    """Attempted to modify or delete an immutable record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Storage failure


class StorageFailureError(AdoptionKernelError):
    """
    The underlying store rejected a write or the commit failed.

    The originating database exception, if any, is chained as __cause__.
    Never retried inside the kernel.
    """

    code: str = "STORAGE_FAILURE"
    category: ErrorCategory = ErrorCategory.STORAGE_FAILURE

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Storage failure during {operation}: {reason}")


class WriteNotAppliedError(StorageFailureError):
    """A conditional write affected zero rows instead of exactly one."""

    code: str = "WRITE_NOT_APPLIED"

    def __init__(self, entity_type: str, entity_id: int, operation: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            operation,
            f"{entity_type} {entity_id} was not updated (no matching row)",
        )
