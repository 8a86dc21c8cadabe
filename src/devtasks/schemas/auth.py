"""Pydantic schemas for registration, login and the current user."""

from pydantic import Field

from devtasks.db.models import USER_EMAIL_MAX, USER_NAME_MAX
from devtasks.schemas.base import ApiModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"
PASSWORD_MIN = 6


class RegisterRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=USER_NAME_MAX)
    email: str = Field(..., min_length=3, max_length=USER_EMAIL_MAX, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=PASSWORD_MIN)


class RegisterResponse(ApiModel):
    message: str
    user_id: int


class LoginRequest(ApiModel):
    email: str
    password: str


class AuthResponse(ApiModel):
    token: str
    user_id: int
    name: str
    email: str


class UserRead(ApiModel):
    id: int
    name: str
    email: str
