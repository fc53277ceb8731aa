from typing import Tuple
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from database.database import get_db
from database.models import Profile, AuthSession
from api.auth import get_current_session
from api.models.auth import SignUpRequest, LoginRequest, SessionResponse, TokenResponse, MessageResponse
from api.models.user import UserResponse
from services import auth_service
from utils.permissions import dashboard_for

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=UserResponse, status_code=201)
async def signup(payload: SignUpRequest, db: Session = Depends(get_db)):
    """Create an account; the user logs in afterwards"""
    profile = auth_service.sign_up(db, payload.full_name, payload.email, payload.password, payload.role)
    return UserResponse.model_validate(profile)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    token, _, profile = auth_service.sign_in(db, payload.email, payload.password)
    return TokenResponse(
        access_token=token,
        user=UserResponse.model_validate(profile),
        dashboard_url=dashboard_for(profile.role),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    current: Tuple[AuthSession, Profile] = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    auth_service.sign_out(db, current[0])
    return MessageResponse(detail="Logged out")


@router.get("/session", response_model=SessionResponse)
async def session(current: Tuple[AuthSession, Profile] = Depends(get_current_session)):
    """Current user and the dashboard for their role"""
    profile = current[1]
    return SessionResponse(
        user=UserResponse.model_validate(profile),
        dashboard_url=dashboard_for(profile.role),
    )
