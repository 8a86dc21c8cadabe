"""Identity service — registration and credential checks.

Learn: Emails are unique and compared exactly (case-sensitive), both
here and in the unique index on users.email. The uniqueness check runs
before the insert; if two registrations race past it, the unique index
fires and the IntegrityError is reported as the same Conflict.

verify_credentials() has a single failure path. An unknown email still
costs one bcrypt verification (against a dummy hash), and both cases
raise the same AuthFailure, so login can't be used to probe which
emails have accounts.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devtasks.auth.password import dummy_hash, hash_password, verify_password
from devtasks.db.models import User
from devtasks.errors import AuthFailure, Conflict

logger = structlog.get_logger()


class IdentityService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = 12):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def get_user(self, user_id: int) -> User | None:
        return await self.db.get(User, user_id)

    async def register(self, name: str, email: str, password: str) -> User:
        """Create a new user. Raises Conflict if the email is taken."""
        if await self.get_by_email(email):
            raise Conflict("Email already exists")

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise Conflict("Email already exists")

        logger.info("user.registered", user_id=user.id)
        return user

    async def verify_credentials(self, email: str, password: str) -> User:
        """Return the user for a valid email/password pair, else AuthFailure."""
        user = await self.get_by_email(email)
        password_hash = user.password_hash if user else dummy_hash(self.bcrypt_rounds)

        # bcrypt runs before the None check so both failures cost the same
        if not verify_password(password, password_hash) or user is None:
            logger.info("auth.login_failed")
            raise AuthFailure("Invalid email or password")

        logger.info("auth.login_succeeded", user_id=user.id)
        return user
