"""Shared API dependencies."""
from datetime import datetime, timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from bridge_lfu.config import get_settings
from bridge_lfu.database import get_db
from bridge_lfu.models.user import Profile, Role
from bridge_lfu.services.permissions import permission_check

bearer_scheme = HTTPBearer(auto_error=False)

__all__ = ["create_access_token", "get_current_user", "get_db", "get_verified_user", "require_permission"]


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Profile:
    """Resolve the profile from a bearer access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    settings = get_settings()
    try:
        payload = jwt.decode(credentials.credentials, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise credentials_exception

    user = db.get(Profile, user_id)
    if user is None:
        raise credentials_exception
    return user


def get_verified_user(current_user: Profile = Depends(get_current_user)) -> Profile:
    """Reject accounts still waiting for validation."""
    if current_user.role == Role.UNVERIFIED.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account awaiting validation",
        )
    return current_user


def require_permission(action: str, resource: str):
    """Dependency factory enforcing a structural (snapshot-free) permission."""
    check = permission_check(action, resource)

    def dependency(current_user: Profile = Depends(get_verified_user)) -> Profile:
        if not check(current_user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Permission denied",
            )
        return current_user

    return dependency
