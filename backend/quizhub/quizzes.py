"""
Quiz and question storage for QuizHub.

``Quiz.total_questions`` is a denormalized count kept in step with the
question rows by ``add_question``/``delete_question`` within the same
transaction.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import NotFoundError
from .logging_config import get_logger
from .models import Question, Quiz, utcnow
from .schemas import QuestionCreate, QuizCreate, QuizUpdate

logger = get_logger("quizhub.quizzes")

UPDATABLE_QUIZ_FIELDS = (
    "title",
    "description",
    "category",
    "difficulty",
    "time_limit",
    "passing_score",
    "is_published",
)


async def get_all_quizzes(session: AsyncSession) -> List[Quiz]:
    result = await session.execute(select(Quiz))
    return list(result.scalars().all())


async def get_published_quizzes(session: AsyncSession) -> List[Quiz]:
    result = await session.execute(select(Quiz).where(Quiz.is_published.is_(True)))
    return list(result.scalars().all())


async def get_quiz(session: AsyncSession, quiz_id: uuid.UUID) -> Optional[Quiz]:
    return await session.get(Quiz, quiz_id)


async def get_quizzes_by_category(session: AsyncSession, category: str) -> List[Quiz]:
    result = await session.execute(select(Quiz).where(Quiz.category == category))
    return list(result.scalars().all())


async def get_quizzes_by_difficulty(session: AsyncSession, difficulty: str) -> List[Quiz]:
    result = await session.execute(select(Quiz).where(Quiz.difficulty == difficulty))
    return list(result.scalars().all())


def build_quiz(data: QuizCreate, now: datetime) -> Quiz:
    return Quiz(
        title=data.title,
        description=data.description,
        category=data.category,
        difficulty=data.difficulty,
        time_limit=data.time_limit,
        passing_score=data.passing_score,
        is_published=data.is_published,
        created_by=data.created_by,
        total_questions=0,
        created_at=now,
        updated_at=now,
    )


async def create_quiz(session: AsyncSession, data: QuizCreate) -> Quiz:
    quiz = build_quiz(data, utcnow())
    session.add(quiz)
    await session.commit()

    logger.info("Quiz created", quiz_id=str(quiz.id), title=quiz.title, category=quiz.category)
    return quiz


async def update_quiz(session: AsyncSession, quiz_id: uuid.UUID, changes: QuizUpdate) -> Quiz:
    """Apply the fields present in ``changes``; omitted fields stay as they are."""
    quiz = await session.get(Quiz, quiz_id)
    if quiz is None:
        raise NotFoundError("Quiz not found")

    for field in UPDATABLE_QUIZ_FIELDS:
        value = getattr(changes, field)
        if value is not None:
            setattr(quiz, field, value)

    quiz.updated_at = utcnow()
    await session.commit()

    logger.info("Quiz updated", quiz_id=str(quiz_id))
    return quiz


async def delete_quiz(session: AsyncSession, quiz_id: uuid.UUID) -> None:
    """Delete a quiz together with all of its questions."""
    quiz = await session.get(Quiz, quiz_id)
    if quiz is None:
        raise NotFoundError("Quiz not found")

    result = await session.execute(delete(Question).where(Question.quiz_id == quiz_id))
    await session.delete(quiz)
    await session.commit()

    logger.info("Quiz deleted", quiz_id=str(quiz_id), questions_deleted=result.rowcount)


async def get_questions(session: AsyncSession, quiz_id: uuid.UUID) -> List[Question]:
    result = await session.execute(
        select(Question).where(Question.quiz_id == quiz_id).order_by(Question.order_number.asc())
    )
    return list(result.scalars().all())


async def get_question(session: AsyncSession, question_id: uuid.UUID) -> Optional[Question]:
    return await session.get(Question, question_id)


def build_question(quiz_id: uuid.UUID, data: QuestionCreate, now: datetime) -> Question:
    return Question(
        quiz_id=quiz_id,
        question_text=data.question_text,
        question_type=data.question_type,
        options=data.options,
        correct_answer=data.correct_answer,
        explanation=data.explanation,
        points=data.points,
        order_number=data.order_number,
        created_at=now,
    )


async def add_question(session: AsyncSession, quiz_id: uuid.UUID, data: QuestionCreate) -> Question:
    quiz = await session.get(Quiz, quiz_id)
    if quiz is None:
        raise NotFoundError("Quiz not found")

    now = utcnow()
    question = build_question(quiz_id, data, now)
    session.add(question)

    quiz.total_questions = (quiz.total_questions or 0) + 1
    quiz.updated_at = now
    await session.commit()

    logger.info(
        "Question added",
        quiz_id=str(quiz_id),
        question_id=str(question.id),
        total_questions=quiz.total_questions,
    )
    return question


async def delete_question(session: AsyncSession, question_id: uuid.UUID) -> None:
    question = await session.get(Question, question_id)
    if question is None:
        raise NotFoundError("Question not found")

    quiz_id = question.quiz_id
    await session.delete(question)

    quiz = await session.get(Quiz, quiz_id)
    if quiz is not None:
        quiz.total_questions = max(0, (quiz.total_questions or 0) - 1)
        quiz.updated_at = utcnow()
    else:
        logger.warning("Deleted question had no owning quiz", question_id=str(question_id), quiz_id=str(quiz_id))

    await session.commit()
    logger.info("Question deleted", question_id=str(question_id), quiz_id=str(quiz_id))
