"""Auth routes - registration, login and the caller's own profile."""

from fastapi import APIRouter

from app.api.deps import CurrentUser, DBSession
from app.schemas.common import APIResponse, ok
from app.schemas.user import (
    AuthResponse,
    PasswordChange,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from app.security import create_access_token
from app.services.user_service import UserService

router = APIRouter()


def _auth_payload(user) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=create_access_token(user.id),
    )


@router.post("/register", response_model=APIResponse[AuthResponse], status_code=201)
async def register(user_data: UserRegister, db: DBSession):
    """Register a new patient account."""
    service = UserService(db)
    user = await service.create_user(user_data)
    return ok(_auth_payload(user), message="User registered successfully")


@router.post("/login", response_model=APIResponse[AuthResponse])
async def login(credentials: UserLogin, db: DBSession):
    """Log in with email and password."""
    service = UserService(db)
    user = await service.authenticate(credentials.email, credentials.password)
    return ok(_auth_payload(user), message="Login successful")


@router.post("/admin/login", response_model=APIResponse[AuthResponse])
async def admin_login(credentials: UserLogin, db: DBSession):
    """Log in to the admin dashboard. Only admin accounts are accepted."""
    service = UserService(db)
    user = await service.authenticate(credentials.email, credentials.password, admin_only=True)
    return ok(_auth_payload(user), message="Admin login successful")


@router.get("/me", response_model=APIResponse[UserResponse])
async def get_me(user: CurrentUser):
    """Get the logged-in user."""
    return ok(UserResponse.model_validate(user))


@router.put("/profile", response_model=APIResponse[UserResponse])
async def update_profile(user_data: UserUpdate, user: CurrentUser, db: DBSession):
    """Update name and phone of the logged-in user."""
    service = UserService(db)
    user = await service.update_user(user, user_data)
    return ok(UserResponse.model_validate(user), message="Profile updated successfully")


@router.put("/change-password", response_model=APIResponse[None])
async def change_password(passwords: PasswordChange, user: CurrentUser, db: DBSession):
    """Change the logged-in user's password."""
    service = UserService(db)
    await service.change_password(user, passwords.current_password, passwords.new_password)
    return ok(message="Password changed successfully")
