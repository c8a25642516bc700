"""Argument validation shared by services."""

from adoption_kernel.exceptions import InvalidIdentifierError

# Largest value a BIGINT primary key can hold
MAX_ID = 2**63 - 1


def require_positive_id(field: str, value: object) -> int:
    """Return ``value`` if it is an int in 1..MAX_ID, else raise InvalidIdentifierError.

    ``bool`` is rejected even though it subclasses ``int``.  Ids past MAX_ID
    could never name a row and would overflow the driver's integer binding.
    """
    if isinstance(value, bool) or not isinstance(value, int) or not 0 < value <= MAX_ID:
        raise InvalidIdentifierError(field, value)
    return value
