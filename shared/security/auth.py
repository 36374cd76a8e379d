"""
Caller identity for the back-office API.

Token issuance and verification happen in the API gateway; it forwards the
authenticated user as X-User-ID / X-User-Role headers. Reads need any known
user, writes need the admin role.
"""

from typing import Optional
import logging

from fastapi import Depends, Header

from shared.exceptions import AuthException, AuthorizationException
from shared.models import UserRole

logger = logging.getLogger(__name__)


async def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role")
) -> dict:
    """Get current user from headers (set by API Gateway)."""
    if not x_user_id or not x_user_role:
        raise AuthException("User authentication required")
    try:
        role = UserRole(x_user_role.lower())
    except ValueError:
        logger.warning(f"Rejected unknown role '{x_user_role}' for user {x_user_id}")
        raise AuthException("Unknown user role", details={"role": x_user_role})
    return {"user_id": x_user_id, "role": role}


async def get_current_admin_user(current_user: dict = Depends(get_current_user)) -> dict:
    """Require the admin role."""
    if current_user["role"] != UserRole.ADMIN:
        raise AuthorizationException("Admin access required")
    return current_user


def is_admin(current_user: dict) -> bool:
    return current_user.get("role") == UserRole.ADMIN
