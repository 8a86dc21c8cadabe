"""Auth API — registration, login, current user.

Learn: Routes for user authentication:
- POST /auth/register → create a new user account
- POST /auth/login → email/password → signed JWT + user info
- GET /auth/me → the user behind the bearer token

Register and login are open; /me requires a token.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devtasks.auth.dependencies import get_current_user, get_token_service
from devtasks.auth.jwt import Principal, TokenService
from devtasks.db.engine import get_db
from devtasks.errors import NotFound
from devtasks.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    UserRead,
)
from devtasks.services.identity_service import IdentityService

router = APIRouter(prefix="/auth")


def _svc(request: Request, db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=RegisterResponse)
async def register(body: RegisterRequest, svc: IdentityService = Depends(_svc)):
    """Create a new user account."""
    user = await svc.register(name=body.name, email=body.email, password=body.password)
    return RegisterResponse(message="User registered successfully", user_id=user.id)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    svc: IdentityService = Depends(_svc),
    tokens: TokenService = Depends(get_token_service),
):
    """Login with email and password → JWT."""
    user = await svc.verify_credentials(body.email, body.password)
    return AuthResponse(
        token=tokens.issue(user),
        user_id=user.id,
        name=user.name,
        email=user.email,
    )


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=UserRead)
async def get_me(
    principal: Principal = Depends(get_current_user),
    svc: IdentityService = Depends(_svc),
):
    """Get the current authenticated user's info."""
    user = await svc.get_user(principal.user_id)
    if not user:
        raise NotFound("User not found")
    return user
