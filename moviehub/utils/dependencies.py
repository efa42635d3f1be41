from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from moviehub.database import get_db
from moviehub.utils.security import decode_token
from moviehub.models.user import User

# Missing credentials are reported by get_current_user itself (401, not 403)
security = HTTPBearer(auto_error=False)


# Dependency to get the current authenticated user
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access denied. No token provided.")

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")

    user_id = payload.get("user_id")
    user = db.query(User).filter(User.id == user_id).first() if user_id is not None else None

    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token. User not found.")

    return user


# Dependency for admin-only routes
async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required."
        )
    return current_user


def can_modify(user: User, owner_id: int) -> bool:
    """Admins may modify anything, everyone else only what they own"""
    return user.is_admin or user.id == owner_id


def ensure_can_modify(user: User, owner_id: int, action: str) -> None:
    if not can_modify(user, owner_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action}"
        )
