"""
Quiz attempt lifecycle: start, submit, query and delete.

Submitting an attempt and crediting the owner's profile happen in one
transaction, so an attempt is never left completed without its points.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import ConflictError, NotFoundError
from .logging_config import get_logger, log_function_call
from .models import Quiz, QuizAttempt, utcnow
from .profiles import credit_profile, run_profile_update
from .schemas import AttemptStart, AttemptSubmit

logger = get_logger("quizhub.attempts")


async def get_all_attempts(session: AsyncSession) -> List[QuizAttempt]:
    result = await session.execute(select(QuizAttempt))
    return list(result.scalars().all())


async def get_attempt(session: AsyncSession, attempt_id: uuid.UUID) -> Optional[QuizAttempt]:
    return await session.get(QuizAttempt, attempt_id)


async def get_attempts_by_user(session: AsyncSession, user_id: uuid.UUID) -> List[QuizAttempt]:
    result = await session.execute(select(QuizAttempt).where(QuizAttempt.user_id == user_id))
    return list(result.scalars().all())


async def get_completed_attempts_by_user(session: AsyncSession, user_id: uuid.UUID) -> List[QuizAttempt]:
    """Completed attempts of a user, most recently completed first."""
    result = await session.execute(
        select(QuizAttempt)
        .where(QuizAttempt.user_id == user_id, QuizAttempt.completed.is_(True))
        .order_by(QuizAttempt.completed_at.desc())
    )
    return list(result.scalars().all())


async def get_attempts_by_quiz(session: AsyncSession, quiz_id: uuid.UUID) -> List[QuizAttempt]:
    result = await session.execute(select(QuizAttempt).where(QuizAttempt.quiz_id == quiz_id))
    return list(result.scalars().all())


async def get_top_scores(session: AsyncSession, quiz_id: uuid.UUID) -> List[QuizAttempt]:
    """Completed attempts of a quiz, best score first."""
    result = await session.execute(
        select(QuizAttempt)
        .where(QuizAttempt.quiz_id == quiz_id, QuizAttempt.completed.is_(True))
        .order_by(QuizAttempt.score.desc())
    )
    return list(result.scalars().all())


async def start_attempt(session: AsyncSession, data: AttemptStart, now: Optional[datetime] = None) -> QuizAttempt:
    """
    Record a new, incomplete attempt.

    The user and quiz are not checked. Without an explicit question count
    the quiz's current count is used when the quiz exists.
    """
    total_questions = data.total_questions
    if total_questions is None:
        quiz = await session.get(Quiz, data.quiz_id)
        total_questions = quiz.total_questions if quiz is not None else 0

    attempt = QuizAttempt(
        user_id=data.user_id,
        quiz_id=data.quiz_id,
        score=0,
        total_questions=total_questions,
        correct_answers=0,
        completed=False,
        created_at=now or utcnow(),
    )
    session.add(attempt)
    await session.commit()

    logger.info("Attempt started", attempt_id=str(attempt.id), user_id=str(data.user_id), quiz_id=str(data.quiz_id))
    return attempt


@log_function_call("submit_attempt")
async def submit_attempt(
    session: AsyncSession,
    attempt_id: uuid.UUID,
    details: AttemptSubmit,
    now: Optional[datetime] = None,
) -> QuizAttempt:
    """
    Complete an attempt and credit its score to the owner's profile.

    Raises:
        NotFoundError: unknown attempt, or the owner has no profile
        ConflictError: the attempt was already submitted
    """
    now = now or utcnow()

    async def operation() -> QuizAttempt:
        attempt = await session.get(QuizAttempt, attempt_id, populate_existing=True)
        if attempt is None:
            raise NotFoundError("Attempt not found")
        if attempt.completed:
            raise ConflictError("Attempt has already been submitted")

        attempt.answers = details.answers
        attempt.score = details.score
        attempt.correct_answers = details.correct_answers
        attempt.time_taken = details.time_taken
        attempt.completed = True
        attempt.completed_at = now

        await credit_profile(session, attempt.user_id, attempt.score, True, now)
        return attempt

    try:
        attempt = await run_profile_update(session, operation, attempt_id=str(attempt_id))
    except (NotFoundError, ConflictError):
        await session.rollback()
        raise

    logger.info(
        "Attempt submitted",
        attempt_id=str(attempt_id),
        user_id=str(attempt.user_id),
        score=attempt.score,
        correct_answers=attempt.correct_answers,
    )
    return attempt


async def delete_attempt(session: AsyncSession, attempt_id: uuid.UUID) -> None:
    attempt = await session.get(QuizAttempt, attempt_id)
    if attempt is None:
        raise NotFoundError("Attempt not found")

    await session.delete(attempt)
    await session.commit()
    logger.info("Attempt deleted", attempt_id=str(attempt_id))
