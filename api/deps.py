"""
Authentication dependencies

Tokens are issued by the identity service. This service only verifies them
and reads three claims: `sub` (user id), `role` and `name`.
"""
from typing import Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from database import get_settings
from core.exceptions import AuthorizationError
from api.errors import http_error

logger = logging.getLogger(__name__)

ROLE_DEVELOPER = "developer"
ROLE_ADMIN = "admin"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


class Principal(BaseModel):
    id: str
    role: str
    name: Optional[str] = None


def get_current_principal(token: Optional[str] = Depends(oauth2_scheme)) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise credentials_exception

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in (ROLE_DEVELOPER, ROLE_ADMIN):
        raise credentials_exception

    return Principal(id=str(user_id), role=role, name=payload.get("name"))


def require_developer(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Developer capability: own games, submissions, versions"""
    if principal.role != ROLE_DEVELOPER:
        raise http_error(AuthorizationError("Developer account required"))
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Reviewer capability: review queue and decisions"""
    if principal.role != ROLE_ADMIN:
        raise http_error(AuthorizationError("Admin privileges required"))
    return principal
