import hashlib
import hmac
import logging
import re
import secrets
from datetime import timedelta, timezone
from typing import Optional, Tuple
from jose import jwt, JWTError, ExpiredSignatureError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from config import settings
from database.models import Profile, AuthSession, UserRole
from services.errors import (
    AuthenticationRequired,
    EmailAlreadyRegistered,
    InvalidCredentials,
    SessionExpired,
    ValidationFailed,
)
from utils.timezone import get_utc_now

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
PBKDF2_ITERATIONS = 260000
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """PBKDF2-HMAC-SHA256, stored as ``pbkdf2_sha256$iterations$salt$hash``"""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt, expected = password_hash.split("$")
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), int(iterations))
    return hmac.compare_digest(digest.hex(), expected)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def sign_up(db: Session, full_name: str, email: str, password: str, role) -> Profile:
    """Create an account with a profile for the given role"""
    full_name = (full_name or "").strip()
    email = normalize_email(email)

    if not full_name:
        raise ValidationFailed("Full name is required.")
    if not EMAIL_RE.match(email):
        raise ValidationFailed("Please enter a valid email address.")
    if len(password or "") < settings.PASSWORD_MIN_LENGTH:
        raise ValidationFailed(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters.")
    try:
        role = UserRole(role)
    except ValueError:
        raise ValidationFailed("Role must be student, organizer or faculty.")

    if get_profile_by_email(db, email) is not None:
        raise EmailAlreadyRegistered(email=email)

    profile = Profile(
        email=email,
        full_name=full_name,
        role=role,
        password_hash=hash_password(password),
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent sign-up with the same email
        db.rollback()
        raise EmailAlreadyRegistered(email=email)
    db.refresh(profile)

    logger.info(f"Profile {profile.id} signed up as {role.value}")
    return profile


def get_profile_by_email(db: Session, email: str) -> Optional[Profile]:
    return db.execute(
        select(Profile).where(Profile.email == normalize_email(email))
    ).scalar_one_or_none()


def sign_in(db: Session, email: str, password: str) -> Tuple[str, AuthSession, Profile]:
    """Check credentials and open a session. Returns (token, session, profile)"""
    profile = get_profile_by_email(db, email)
    if profile is None or not verify_password(password or "", profile.password_hash):
        raise InvalidCredentials()

    now = get_utc_now()
    auth_session = AuthSession(
        id=secrets.token_urlsafe(32),
        profile_id=profile.id,
        created_at=now,
        expires_at=now + timedelta(minutes=settings.ACCESS_TOKEN_TTL_MINUTES),
    )
    db.add(auth_session)
    db.commit()
    db.refresh(auth_session)

    logger.info(f"Profile {profile.id} signed in")
    return issue_token(auth_session), auth_session, profile


def issue_token(auth_session: AuthSession) -> str:
    expires = auth_session.expires_at.replace(tzinfo=timezone.utc)
    payload = {
        "sub": str(auth_session.profile_id),
        "sid": auth_session.id,
        "exp": int(expires.timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def get_session(db: Session, token: str) -> Tuple[AuthSession, Profile]:
    """Resolve a bearer token to its live session and profile"""
    if not token:
        raise AuthenticationRequired()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
    except ExpiredSignatureError:
        raise SessionExpired()
    except JWTError:
        raise AuthenticationRequired("Invalid authentication token.")

    auth_session = db.get(AuthSession, payload.get("sid"))
    if auth_session is None or str(auth_session.profile_id) != str(payload.get("sub")):
        raise AuthenticationRequired("Invalid authentication token.")
    if auth_session.revoked_at is not None or auth_session.expires_at <= get_utc_now():
        raise SessionExpired()

    return auth_session, auth_session.profile


def sign_out(db: Session, auth_session: AuthSession):
    """Revoke the session; signing out twice is harmless"""
    if auth_session.revoked_at is None:
        auth_session.revoked_at = get_utc_now()
        db.commit()
        logger.info(f"Profile {auth_session.profile_id} signed out")
