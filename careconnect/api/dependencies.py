"""API dependencies for authentication and authorization."""
from dataclasses import dataclass
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from careconnect.core.database import get_db
from careconnect.core.security import ROLE_ADMIN, ROLE_CAREGIVER, decode_access_token
from careconnect.models.caregiver import Caregiver
from careconnect.repositories.caregiver_repository import CaregiverRepository

# Security scheme
security = HTTPBearer()


@dataclass(frozen=True)
class Principal:
    """Caller identity as asserted by the auth service."""
    id: int
    role: str


def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> Principal:
    """
    Extract the caller from the Bearer token.

    Raises:
        HTTPException: If token invalid or missing claims
    """
    payload = decode_access_token(credentials.credentials)

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or role is None or not str(subject).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )
    return Principal(id=int(subject), role=role)


def require_role(role: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @app.get("/admin-only")
        def admin_endpoint(user: Principal = Depends(require_role(ROLE_ADMIN))):
            ...
    """
    def role_checker(principal: Annotated[Principal, Depends(get_principal)]) -> Principal:
        if principal.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {role}"
            )
        return principal

    return role_checker


def get_current_caregiver(
    principal: Annotated[Principal, Depends(require_role(ROLE_CAREGIVER))],
    db: Annotated[Session, Depends(get_db)]
) -> Caregiver:
    """
    Caregiver row behind a caregiver token.

    Raises:
        HTTPException: If the caregiver does not exist or is inactive
    """
    caregiver = CaregiverRepository(db).get_by_id(principal.id)
    if caregiver is None or not caregiver.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Caregiver not found or inactive"
        )
    return caregiver


# Common role dependencies
AdminUser = Annotated[Principal, Depends(require_role(ROLE_ADMIN))]
CaregiverUser = Annotated[Caregiver, Depends(get_current_caregiver)]
