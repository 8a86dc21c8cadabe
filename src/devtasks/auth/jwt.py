"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. The token
is the only session state there is: it carries the user id, name and
email, plus issued-at and expiry. Verification checks the signature,
the issuer and the expiry; the embedded user id is then the authoritative
identity for every authorization decision.

TokenService holds the signing secret. It is built once from Settings
in create_app() and stored on app.state.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from devtasks.config import Settings
from devtasks.db.models import User


class TokenError(Exception):
    """Raised when token verification fails."""


@dataclass(frozen=True)
class Principal:
    """The verified identity attached to a request."""

    user_id: int
    name: str
    email: str


class TokenService:
    """Issues and verifies signed bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60 * 24,
        issuer: str = "devtasks",
    ):
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.issuer = issuer

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expire_minutes=settings.access_token_expire_minutes,
            issuer=settings.jwt_issuer,
        )

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        """Create a signed token for a user."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "uid": user.id,
            "name": user.name,
            "email": user.email,
            "iss": self.issuer,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        """Verify and decode a token.

        Returns the Principal on success.
        Raises TokenError on a bad signature, bad structure or expiry.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub", "iss"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise TokenError("Invalid token: bad subject")

        return Principal(
            user_id=user_id,
            name=payload.get("name", ""),
            email=payload.get("email", ""),
        )
