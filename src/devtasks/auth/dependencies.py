"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers to extract
and validate the current principal from the request. The only
mechanism is a Bearer JWT in the Authorization header.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from devtasks.auth.jwt import Principal, TokenError, TokenService
from devtasks.errors import Unauthenticated


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> Principal:
    """Resolve the bearer token to a Principal (401 if absent or invalid)."""
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthenticated("Authentication required")
    try:
        return tokens.verify(token)
    except TokenError as e:
        raise Unauthenticated(str(e))
