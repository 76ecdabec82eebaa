# atelier/domain/actor.py
from dataclasses import dataclass

from atelier.domain.enums import UserRole
from atelier.domain.errors import ForbiddenError

ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


@dataclass(frozen=True)
class Actor:
    """
    Authenticated caller as handed over by the identity layer.
    Services take an Actor instead of re-deriving role rules per call site.
    """

    user_id: str
    role: UserRole = UserRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def require_admin(self) -> None:
        if not self.is_admin:
            raise ForbiddenError("Admin privileges required")

    def can_access(self, owner_id: str) -> bool:
        return self.is_admin or owner_id == self.user_id

    def require_access(self, owner_id: str, message: str = "Access denied") -> None:
        if not self.can_access(owner_id):
            raise ForbiddenError(message)
