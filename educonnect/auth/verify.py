"""
Supabase access-token checks.

Teachers sign in through Supabase Auth; the API only ever sees the ES256
access token. Signing keys come from the project's JWKS endpoint and are
cached by PyJWKClient. The token subject is the teacher id that owns the
contact rows.
"""

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient

from educonnect.config import settings
from educonnect.infrastructure.observability.logging import bind_request_context, get_logger

SUPABASE_AUDIENCE = "authenticated"

logger = get_logger(__name__)

_jwk_client = PyJWKClient(settings.jwks_url(), cache_keys=True)
_security = HTTPBearer()


def verify_jwt(token: str) -> dict:
    """Decode and validate a Supabase access token, raising 401 when it is not usable."""
    try:
        signing_key = _jwk_client.get_signing_key_from_jwt(token)
        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["ES256"],
            audience=SUPABASE_AUDIENCE,
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError as e:
        logger.info("Rejected access token", reason=type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def auth_dependency(credentials: HTTPAuthorizationCredentials = Depends(_security)) -> dict:
    return verify_jwt(credentials.credentials)


def current_owner_id(claims: dict = Depends(auth_dependency)) -> str:
    """Teacher id (the JWT subject) that owns the contact records."""
    owner_id = claims.get("sub")
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User ID not found in claims",
        )
    bind_request_context(owner_id=owner_id)
    return owner_id


def owner_id_from_token(token: str) -> str | None:
    """Socket handshakes carry the token as a query parameter; None means reject."""
    try:
        claims = verify_jwt(token)
    except HTTPException:
        return None
    return claims.get("sub") or None
