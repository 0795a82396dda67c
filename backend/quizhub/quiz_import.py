"""
Load quizzes from YAML documents.

A document describes one quiz and its questions::

    title: Logic Gates
    category: logic-gates
    difficulty: beginner
    createdBy: 0b6f...            # optional, falls back to the importer's id
    isPublished: true
    questions:
      - questionText: Which gate outputs 1 only when all inputs are 1?
        questionType: multiple_choice
        options: [AND, OR, XOR, NAND]
        correctAnswer: AND
        points: 10

Questions without ``orderNumber`` are numbered in document order.
"""

import uuid
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pydantic
import yaml
from sqlalchemy.ext.asyncio import AsyncSession

from . import quizzes
from .errors import ValidationError
from .logging_config import get_logger
from .models import Quiz, utcnow
from .schemas import QuestionCreate, QuizCreate

logger = get_logger("quizhub.quiz_import")


def _format_errors(exc: pydantic.ValidationError, prefix: str) -> List[str]:
    return [
        f"{prefix}{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]


def parse_quiz_document(content: str, created_by: uuid.UUID) -> Tuple[QuizCreate, List[QuestionCreate]]:
    """
    Parse and validate one YAML quiz document.

    Raises:
        ValidationError: the YAML is malformed or fields are missing/invalid
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ValidationError(f"Invalid YAML format: {exc}") from exc

    if not isinstance(data, dict):
        raise ValidationError("Quiz document must be a mapping")

    raw_questions = data.pop("questions", None) or []
    if not isinstance(raw_questions, list):
        raise ValidationError("Field 'questions' must be a list")

    data.setdefault("createdBy", str(created_by))

    errors: List[str] = []
    quiz = None
    try:
        quiz = QuizCreate.model_validate(data)
    except pydantic.ValidationError as exc:
        errors.extend(_format_errors(exc, ""))

    questions: List[QuestionCreate] = []
    for index, raw_question in enumerate(raw_questions, start=1):
        if not isinstance(raw_question, dict):
            errors.append(f"Question {index} must be a mapping")
            continue
        question_data: Dict[str, Any] = dict(raw_question)
        question_data.setdefault("orderNumber", index)
        if "correctAnswer" in question_data:
            question_data["correctAnswer"] = str(question_data["correctAnswer"])
        try:
            questions.append(QuestionCreate.model_validate(question_data))
        except pydantic.ValidationError as exc:
            errors.extend(_format_errors(exc, f"Question {index}: "))

    if errors:
        raise ValidationError("; ".join(errors))

    return quiz, questions


async def import_quiz(session: AsyncSession, content: str, created_by: uuid.UUID) -> Quiz:
    """Create a quiz together with its questions in a single transaction."""
    quiz_data, questions = parse_quiz_document(content, created_by)

    now = utcnow()
    quiz = quizzes.build_quiz(quiz_data, now)
    try:
        session.add(quiz)
        # assigns quiz.id for the question rows
        await session.flush()
        session.add_all([quizzes.build_question(quiz.id, question, now) for question in questions])
        quiz.total_questions = len(questions)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Quiz imported", quiz_id=str(quiz.id), title=quiz.title, questions=len(questions))
    return quiz


async def import_quiz_file(session: AsyncSession, path: Path, created_by: uuid.UUID) -> Quiz:
    return await import_quiz(session, path.read_text(encoding="utf-8"), created_by)
