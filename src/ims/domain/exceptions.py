"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed input, rejected before anything is written."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ConflictError(DomainException):
    """A uniqueness, referential or availability rule was violated."""


class InvalidTransitionError(DomainException):
    """A reservation status change is not permitted from its current state."""

    def __init__(self, current: str, attempted: str, message: str | None = None) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(
            message
            or f"Cannot transition reservation from '{current}' to '{attempted}'"
        )


class ConcurrencyConflictError(DomainException):
    """A concurrent writer won the race for the same rows.

    Transient: callers retry the whole unit of work a bounded number
    of times before surfacing it.
    """
