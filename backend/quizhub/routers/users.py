import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from .. import profiles
from ..database import get_session
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..schemas import ProfileCreate, ProfileOut, ProfileSyncRequest, ProfileUpdate

router = APIRouter(prefix="/user", tags=["user"])

logger = get_logger("quizhub.routers.users")


async def _profile_or_404(session: AsyncSession, user_id: uuid.UUID):
    profile = await profiles.get_profile(session, user_id)
    if profile is None:
        raise NotFoundError(f"Profile '{user_id}' not found")
    return profile


@router.get("/profiles", response_model=List[ProfileOut])
async def list_profiles(session: AsyncSession = Depends(get_session)):
    return await profiles.get_all_profiles(session)


@router.get("/profile/email/{email}", response_model=ProfileOut)
async def get_profile_by_email(email: str, session: AsyncSession = Depends(get_session)):
    profile = await profiles.get_profile_by_email(session, email)
    if profile is None:
        raise NotFoundError(f"Profile for '{email}' not found")
    return profile


@router.get("/profile/{user_id}", response_model=ProfileOut)
async def get_profile(user_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await _profile_or_404(session, user_id)


@router.get("/stats/{user_id}", response_model=ProfileOut)
async def get_user_stats(user_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    """Points, completed quizzes and streaks of a user"""
    return await _profile_or_404(session, user_id)


@router.post("/profile", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
async def create_profile(payload: ProfileCreate, session: AsyncSession = Depends(get_session)):
    return await profiles.create_profile(session, payload)


@router.post("/profile/sync", response_model=ProfileOut)
async def sync_profile(payload: ProfileSyncRequest, session: AsyncSession = Depends(get_session)):
    """
    Create or reconcile a profile right after signup with an external
    identity provider. Safe to call repeatedly.
    """
    if payload.user_id is None or not payload.email or not payload.email.strip():
        logger.warning("Invalid profile sync request: missing userId or email")
        raise ValidationError("userId and email are required")

    profile, created = await profiles.sync_profile_after_signup(session, payload)
    logger.info("Profile synced", user_id=str(profile.id), newly_created=created)
    return profile


@router.put("/profile/{user_id}", response_model=ProfileOut)
async def update_profile(user_id: uuid.UUID, payload: ProfileUpdate, session: AsyncSession = Depends(get_session)):
    return await profiles.update_profile(session, user_id, payload)


@router.delete("/profile/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_profile(user_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    await profiles.delete_profile(session, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
