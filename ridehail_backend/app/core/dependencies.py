"""
Authentication dependencies for FastAPI.

Supplies the verified caller identity (a driver id) to protected routes.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from ridehail_backend.app.core.exceptions import UnauthorizedError
from ridehail_backend.app.core.jwt import decode_access_token, DRIVER_TOKEN_TYPE

# auto_error=False so a missing header goes through UnauthorizedError (401)
# instead of FastAPI's default 403
security = HTTPBearer(auto_error=False)


async def get_current_driver(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """
    FastAPI dependency for JWT authentication of drivers.

    Checks:
    1. A bearer token is present
    2. Token signature and expiry are valid
    3. Token was issued to a driver and names a driver_id

    Whether the driver still exists is left to the handler, so that a
    deleted driver surfaces as 404 rather than 401.

    Returns:
        Decoded token payload

    Raises:
        UnauthorizedError: 401 if authentication fails for any reason
    """
    if credentials is None:
        raise UnauthorizedError()

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedError("Could not validate credentials")

    if payload.get("type") != DRIVER_TOKEN_TYPE or payload.get("driver_id") is None:
        raise UnauthorizedError("Invalid token payload")

    return payload
