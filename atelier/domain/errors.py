"""Domain errors.

Services raise these; routers translate them into HTTP responses.
Each kind maps to one status code, see ``atelier.api.errors``.
"""


class DomainError(Exception):
    """Base class for all business rule violations."""


class NotFoundError(DomainError):
    """Entity absent, or not visible to the caller."""


class ConflictError(DomainError):
    """Duplicate SKU/slug/email or another uniqueness collision."""


class ConcurrencyConflictError(ConflictError):
    """A concurrent writer won a race; the unit of work may be retried."""


class InvalidStateError(DomainError):
    """Operation not allowed at the entity's current lifecycle stage."""


class InvalidTransitionError(InvalidStateError):

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot transition from {_name(current)} to {_name(requested)}"
        )


class BadRequestError(DomainError):
    """Malformed or contradictory input."""


class ForbiddenError(DomainError):
    """Authenticated, but not allowed to touch this resource."""


def _name(status) -> str:
    return getattr(status, "value", status)
