"""User service - Business logic for accounts and authentication."""

import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.exceptions import AuthenticationError, Conflict, NotFound
from app.models.user import User, UserRole
from app.schemas.user import UserRegister, UserUpdate
from app.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Service class for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(
        self, user_data: UserRegister, role: UserRole = UserRole.PATIENT
    ) -> User:
        """Create a new user. Registration always creates patients."""
        if await self.get_user_by_email(user_data.email):
            raise Conflict("User already exists with this email")

        user = User(
            name=user_data.name,
            email=user_data.email,
            phone=user_data.phone,
            password_hash=hash_password(user_data.password),
            role=role.value,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        logger.info(f"Registered {user.role} {user.email}")
        return user

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID."""
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Get a user by email address."""
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str, admin_only: bool = False) -> User:
        """Check credentials and return the user."""
        label = "admin credentials" if admin_only else "credentials"
        user = await self.get_user_by_email(email)

        if not user or (admin_only and not user.is_admin):
            raise AuthenticationError(f"Invalid {label}")

        if not user.is_active:
            raise AuthenticationError("Your account has been deactivated. Please contact support.")

        if not verify_password(password, user.password_hash):
            raise AuthenticationError(f"Invalid {label}")

        return user

    async def update_user(self, user: User, user_data: UserUpdate) -> User:
        """Update a user."""
        update_data = user_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in update_data.items():
            setattr(user, field, value)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """Replace the password after checking the current one."""
        if not verify_password(current_password, user.password_hash):
            raise AuthenticationError("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        await self.db.flush()

    async def require_user(self, user_id: UUID) -> User:
        """Get a user by ID or raise NotFound."""
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def ensure_admin(self, name: str, email: str, password: str) -> User:
        """Create the admin account if it does not exist yet."""
        existing = await self.get_user_by_email(email)
        if existing:
            if not existing.is_admin:
                existing.role = UserRole.ADMIN.value
                await self.db.flush()
            return existing

        admin = User(
            name=name,
            email=email.strip().lower(),
            password_hash=hash_password(password),
            role=UserRole.ADMIN.value,
        )
        self.db.add(admin)
        await self.db.flush()
        await self.db.refresh(admin)
        logger.info(f"Seeded admin account {admin.email}")
        return admin
