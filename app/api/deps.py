"""Shared route dependencies."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.exceptions import AuthenticationError, Unauthorized
from app.models.user import User, UserRole
from app.security import decode_access_token
from app.services.notification_service import NotificationDispatcher
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

DBSession = Annotated[AsyncSession, Depends(get_db)]

security = HTTPBearer(auto_error=False)


async def get_current_user(
    db: DBSession,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """Resolve the bearer token to an active user."""
    if not credentials:
        raise AuthenticationError("Not authorized, no token")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = UUID(payload["sub"])
    except ValueError as e:
        raise AuthenticationError("Not authorized, invalid token") from e

    user = await UserService(db).get_user_by_id(user_id)
    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        logger.warning(f"⚠️ Deactivated user {user.email} attempted to authenticate")
        raise AuthenticationError("Your account has been deactivated. Please contact support.")

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_role(*roles: UserRole):
    """Dependency factory that only lets the given roles through."""
    allowed = {role.value for role in roles}

    async def checker(user: CurrentUser) -> User:
        if user.role not in allowed:
            raise Unauthorized(f"User role '{user.role}' is not authorized to access this route")
        return user

    return checker


AdminUser = Annotated[User, Depends(require_role(UserRole.ADMIN))]
PatientUser = Annotated[User, Depends(require_role(UserRole.PATIENT))]


def get_notifier(background_tasks: BackgroundTasks) -> NotificationDispatcher:
    return NotificationDispatcher(background_tasks)


Notifier = Annotated[NotificationDispatcher, Depends(get_notifier)]
