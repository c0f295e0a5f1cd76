"""
FastAPI dependency injection for viewer identity
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from app.utils.security import get_viewer_id_from_token

# optional bearer that doesn't raise when missing
security_optional = HTTPBearer(auto_error=False)


async def get_viewer_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> Optional[str]:
    """
    Dependency to resolve the requesting viewer (doesn't raise if not authenticated)

    Endpoints that need a viewer (like/unlike) reject a None result themselves.

    Args:
        credentials: Optional HTTP Authorization credentials

    Returns:
        Clerk user id if the session token verifies, None otherwise
    """
    if not credentials:
        return None
    return get_viewer_id_from_token(credentials.credentials)
