from typing import Optional, Tuple
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from database.database import get_db
from database.models import Profile, AuthSession, UserRole
from services import auth_service
from services.errors import AuthenticationRequired, PermissionDenied

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Tuple[AuthSession, Profile]:
    """Session and profile behind the Authorization: Bearer header"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationRequired()
    return auth_service.get_session(db, credentials.credentials)


def get_current_user(
    current: Tuple[AuthSession, Profile] = Depends(get_current_session),
) -> Profile:
    return current[1]


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Profile]:
    """Current user for public pages; anonymous when the token is missing or invalid"""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return auth_service.get_session(db, credentials.credentials)[1]
    except AuthenticationRequired:
        return None


def require_role(role: UserRole, message: str):
    """Dependency allowing only one role"""
    def dependency(user: Profile = Depends(get_current_user)) -> Profile:
        if user.role != role:
            raise PermissionDenied(message, role=user.role.value)
        return user
    return dependency


get_current_student = require_role(UserRole.STUDENT, "Access denied. This page is for students only.")
get_current_organizer = require_role(UserRole.ORGANIZER, "Access denied. This page is for organizers only.")
get_current_faculty = require_role(UserRole.FACULTY, "Access denied. This page is for faculty only.")
