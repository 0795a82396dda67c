"""
Profile storage and statistics for QuizHub.

Profiles are keyed by the user id and hold the aggregate counters shown on
leaderboards. Counter updates go through ``run_profile_update`` which retries
when another request changed the same profile in between.
"""

import uuid
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from .config import settings
from .errors import ConflictError, NotFoundError
from .logging_config import get_logger, log_function_call
from .models import Profile, utcnow
from .schemas import ProfileCreate, ProfileSyncRequest, ProfileUpdate
from .streaks import apply_stats

logger = get_logger("quizhub.profiles")

T = TypeVar("T")


def new_profile(
    user_id: uuid.UUID,
    email: str,
    full_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Profile:
    """Build a profile with all statistics at zero."""
    now = now or utcnow()
    return Profile(
        id=user_id,
        email=email,
        full_name=full_name,
        avatar_url=avatar_url,
        total_points=0,
        quizzes_completed=0,
        current_streak=0,
        longest_streak=0,
        created_at=now,
        updated_at=now,
    )


async def get_all_profiles(session: AsyncSession) -> List[Profile]:
    result = await session.execute(select(Profile))
    return list(result.scalars().all())


async def get_profile(session: AsyncSession, user_id: uuid.UUID) -> Optional[Profile]:
    return await session.get(Profile, user_id)


async def get_profile_by_email(session: AsyncSession, email: str) -> Optional[Profile]:
    result = await session.execute(select(Profile).where(Profile.email == email))
    return result.scalar_one_or_none()


async def create_profile(session: AsyncSession, data: ProfileCreate) -> Profile:
    existing = await session.execute(
        select(Profile.id).where(or_(Profile.id == data.id, Profile.email == data.email))
    )
    if existing.first() is not None:
        raise ConflictError(f"Profile for '{data.email}' already exists")

    profile = new_profile(data.id, data.email, data.full_name, data.avatar_url)
    session.add(profile)
    await session.commit()

    logger.info("Profile created", user_id=str(profile.id), email=profile.email)
    return profile


async def sync_profile_after_signup(session: AsyncSession, request: ProfileSyncRequest) -> Tuple[Profile, bool]:
    """
    Create the profile for an externally registered user, or reconcile it.

    An existing profile only gets ``full_name``/``avatar_url`` updated, and
    only when a value is provided and differs from the stored one.

    Returns:
        The profile and whether it was newly created
    """
    logger.info("Syncing profile after signup", user_id=str(request.user_id), email=request.email)

    profile = await session.get(Profile, request.user_id)

    if profile is None:
        if await get_profile_by_email(session, request.email) is not None:
            logger.warning("Sync refused, email belongs to another profile", email=request.email)
            raise ConflictError(f"Profile for '{request.email}' already exists")

        profile = new_profile(request.user_id, request.email, request.full_name, request.avatar_url)
        session.add(profile)
        await session.commit()
        logger.info("Profile created during sync", user_id=str(profile.id))
        return profile, True

    updated = False
    if request.full_name is not None and request.full_name != profile.full_name:
        profile.full_name = request.full_name
        updated = True
    if request.avatar_url is not None and request.avatar_url != profile.avatar_url:
        profile.avatar_url = request.avatar_url
        updated = True

    if updated:
        profile.updated_at = utcnow()
        await session.commit()
        logger.info("Profile updated during sync", user_id=str(profile.id))

    return profile, False


async def update_profile(session: AsyncSession, user_id: uuid.UUID, changes: ProfileUpdate) -> Profile:
    profile = await session.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("Profile not found")

    if changes.full_name is not None:
        profile.full_name = changes.full_name
    if changes.avatar_url is not None:
        profile.avatar_url = changes.avatar_url

    profile.updated_at = utcnow()
    await session.commit()
    return profile


async def delete_profile(session: AsyncSession, user_id: uuid.UUID) -> None:
    profile = await session.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("Profile not found")

    await session.delete(profile)
    await session.commit()
    logger.info("Profile deleted", user_id=str(user_id))


async def run_profile_update(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    **log_context,
) -> T:
    """
    Run ``operation`` and commit, retrying when a profile row was changed
    concurrently (its version no longer matches).

    ``operation`` must re-read everything it modifies, since the session is
    rolled back before each retry.
    """
    retries = max(1, settings.stats_update_retries)

    for attempt in range(1, retries + 1):
        try:
            result = await operation()
            await session.commit()
            return result
        except StaleDataError:
            await session.rollback()
            logger.warning("Concurrent profile update detected", attempt=attempt, **log_context)

    raise ConflictError("Profile was modified concurrently, please retry")


async def credit_profile(
    session: AsyncSession,
    user_id: uuid.UUID,
    points_earned: int,
    completed: bool,
    now: datetime,
) -> Profile:
    """Load the profile and apply the statistics change without committing."""
    profile = await session.get(Profile, user_id, populate_existing=True)
    if profile is None:
        raise NotFoundError("Profile not found")

    apply_stats(profile, points_earned, completed, now)
    await session.flush()
    return profile


@log_function_call("update_stats")
async def update_stats(
    session: AsyncSession,
    user_id: uuid.UUID,
    points_earned: int,
    completed: bool = True,
    now: Optional[datetime] = None,
) -> Profile:
    """
    Add earned points to a profile and, for a completed quiz, bump the
    completed-quiz count and the streak counters.
    """

    async def operation() -> Profile:
        return await credit_profile(session, user_id, points_earned, completed, now or utcnow())

    profile = await run_profile_update(session, operation, user_id=str(user_id))

    logger.info(
        "Profile stats updated",
        user_id=str(user_id),
        points_earned=points_earned,
        total_points=profile.total_points,
        current_streak=profile.current_streak,
    )
    return profile


async def get_leaderboard(session: AsyncSession, limit: int = 0) -> List[Profile]:
    """Profiles by total points, highest first. ``limit`` <= 0 returns all."""
    query = select(Profile).order_by(Profile.total_points.desc())
    if limit > 0:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_streak_leaderboard(session: AsyncSession, limit: int = 0) -> List[Profile]:
    """Profiles by current streak, highest first. ``limit`` <= 0 returns all."""
    query = select(Profile).order_by(Profile.current_streak.desc())
    if limit > 0:
        query = query.limit(limit)
    result = await session.execute(query)
    return list(result.scalars().all())
