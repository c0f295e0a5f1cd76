"""
Security utilities for verifying Clerk session tokens
"""

from typing import Optional, Dict, Any
from jose import JWTError, jwt
from app.config import settings


def _verification_key() -> str:
    # .env files often carry the PEM on one line with literal "\n"
    return settings.CLERK_JWT_KEY.replace("\\n", "\n")


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a Clerk session token

    Args:
        token: JWT from the Authorization header

    Returns:
        Decoded token claims

    Raises:
        JWTError: If the token is invalid, expired, or no key is configured
    """
    if not settings.CLERK_JWT_KEY:
        raise JWTError("CLERK_JWT_KEY is not configured")

    options = {"verify_aud": False}
    kwargs: Dict[str, Any] = {}
    if settings.CLERK_ISSUER:
        kwargs["issuer"] = settings.CLERK_ISSUER
    else:
        options["verify_iss"] = False

    return jwt.decode(
        token,
        _verification_key(),
        algorithms=[settings.CLERK_JWT_ALGORITHM],
        options=options,
        **kwargs,
    )


def get_viewer_id_from_token(token: Optional[str]) -> Optional[str]:
    """
    Resolve the viewer id (Clerk user id, the `sub` claim) from a token

    Args:
        token: JWT or None

    Returns:
        The viewer id, or None if the token is missing or does not verify
    """
    if not token:
        return None
    try:
        payload = decode_session_token(token)
    except JWTError:
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None
