# app/auth/dependencies.py
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.models.profile import Profile
from app.utils.jwt_handler import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)


def _profile_from_token(token: str, db: Session) -> Profile:
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    profile = db.query(Profile).filter(Profile.id == payload["sub"]).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return profile


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Profile:
    return _profile_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[Profile]:
    """Like get_current_user, but anonymous requests get None instead of a 401."""
    if credentials is None:
        return None
    return _profile_from_token(credentials.credentials, db)


def get_current_trainee(current_user: Profile = Depends(get_current_user)) -> Profile:
    if current_user.role != "trainee":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Trainee access required")
    return current_user
