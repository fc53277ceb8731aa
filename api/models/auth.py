from pydantic import BaseModel
from api.models.user import UserResponse


class SignUpRequest(BaseModel):
    full_name: str
    email: str
    password: str
    role: str


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    user: UserResponse
    dashboard_url: str


class TokenResponse(SessionResponse):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    detail: str
