"""Password hashing and bearer token helpers."""

import logging
from datetime import datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification error: {e}")
        return False


def create_access_token(user_id: Any, expires_minutes: int | None = None) -> str:
    """Create a signed access token whose subject is the user ID."""
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or settings.jwt_expire_minutes)
    to_encode = {"sub": str(user_id), "exp": expire, "iat": datetime.utcnow()}
    return jose_jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify and decode an access token, raising AuthenticationError."""
    try:
        payload = jose_jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise AuthenticationError("Token expired, please login again") from e
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        raise AuthenticationError("Not authorized, invalid token") from e

    if not payload.get("sub"):
        raise AuthenticationError("Not authorized, invalid token")
    return payload
