"""Account registration, password login and bearer tokens for QuizHub."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
from fastapi.security import HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .errors import DuplicateEmailError, UnauthorizedError, ValidationError
from .logging_config import get_logger
from .models import User, utcnow
from .profiles import get_profile_by_email, new_profile
from .schemas import AuthResponse

logger = get_logger("quizhub.auth")

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72

http_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(user: User, now: Optional[datetime] = None) -> str:
    """Issue a signed token carrying the user id and email."""
    issued_at = now or utcnow()
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(minutes=settings.access_token_expire_minutes)).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        logger.info("Token expired")
        raise UnauthorizedError("Token expired") from exc
    except JWTError as exc:
        logger.warning("Token verification failed", error=str(exc))
        raise UnauthorizedError("Invalid token") from exc


def _validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        token=create_access_token(user),
    )


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register(session: AsyncSession, email: str, password: str, full_name: Optional[str]) -> AuthResponse:
    """Create an account and its empty profile, returning a token for it."""
    logger.info("Registering new user", email=email)

    taken = await get_user_by_email(session, email) is not None
    if taken or await get_profile_by_email(session, email) is not None:
        raise DuplicateEmailError("Email already registered")

    _validate_password(password)

    now = utcnow()
    user = User(
        id=uuid.uuid4(),
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        is_active=True,
        email_verified=True,
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    session.add(new_profile(user.id, email, full_name, now=now))
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("Registration lost a race on email", email=email)
        raise DuplicateEmailError("Email already registered") from exc

    logger.info("User registered", user_id=str(user.id), email=email)
    return _auth_response(user)


async def login(session: AsyncSession, email: str, password: str) -> AuthResponse:
    logger.info("Login attempt", email=email)

    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("Login failed with invalid credentials", email=email)
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active:
        logger.info("Login refused for inactive account", email=email)
        raise UnauthorizedError("Account is deactivated")

    user.last_login = utcnow()
    await session.commit()

    logger.info("User logged in", user_id=str(user.id))
    return _auth_response(user)


async def validate_token(session: AsyncSession, token: str) -> User:
    """Resolve the user a token was issued to."""
    payload = _decode_token(token)

    subject = payload.get("sub")
    try:
        user_id = uuid.UUID(subject)
    except (TypeError, ValueError) as exc:
        logger.warning("Token subject is not a user id", subject=subject)
        raise UnauthorizedError("Invalid token") from exc

    user = await session.get(User, user_id)
    if user is None:
        logger.warning("Token refers to unknown user", user_id=subject)
        raise UnauthorizedError("Invalid token")

    return user
