from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from .. import auth
from ..database import get_session
from ..errors import UnauthorizedError, ValidationError
from ..logging_config import get_logger
from ..schemas import AuthResponse, LoginRequest, RegisterRequest, ValidateResponse

router = APIRouter(prefix="/auth", tags=["auth"])

logger = get_logger("quizhub.routers.auth")


def _require_credentials(email: Optional[str], password: Optional[str]) -> None:
    if not email or not email.strip():
        raise ValidationError("Email is required")
    if not password or not password.strip():
        raise ValidationError("Password is required")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """Create an account and return a token for it"""
    _require_credentials(payload.email, payload.password)
    return await auth.register(session, payload.email.strip(), payload.password, payload.full_name)


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, session: AsyncSession = Depends(get_session)):
    """Authenticate with email and password"""
    _require_credentials(payload.email, payload.password)
    return await auth.login(session, payload.email.strip(), payload.password)


@router.get("/validate", response_model=ValidateResponse)
async def validate(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(auth.http_bearer),
    session: AsyncSession = Depends(get_session),
):
    """Check a bearer token; every failure gets the same response"""
    invalid = JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=ValidateResponse(valid=False).model_dump(by_alias=True),
    )
    if credentials is None:
        return invalid

    try:
        user = await auth.validate_token(session, credentials.credentials)
    except UnauthorizedError as exc:
        logger.debug("Token rejected", reason=exc.message)
        return invalid

    return ValidateResponse(valid=True, email=user.email)
