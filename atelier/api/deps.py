# atelier/api/deps.py
from typing import Optional

from fastapi import Header, HTTPException

from atelier.domain.actor import Actor
from atelier.domain.enums import UserRole


def get_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: UserRole = Header(UserRole.CUSTOMER),
) -> Actor:
    """
    Caller identity as forwarded by the auth gateway.
    Tokens are verified upstream, this service only reads the headers.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return Actor(user_id=x_user_id, role=x_user_role)
