"""Bearer token helpers.

Sessions and password login live outside this service; it only needs to
verify a signed token naming the caller and their role.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, status

from careconnect.core.config import settings

ROLE_ADMIN = "admin"
ROLE_CAREGIVER = "caregiver"


def create_access_token(subject: int, role: str,
                        expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token for ``subject`` acting as ``role``."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(subject),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a bearer token.

    Raises:
        HTTPException: 401 if the token is expired or malformed
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired"
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )
