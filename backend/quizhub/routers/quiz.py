import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from .. import quizzes
from ..database import get_session
from ..errors import NotFoundError
from ..schemas import QuestionCreate, QuestionOut, QuizCreate, QuizOut, QuizUpdate

router = APIRouter(prefix="/quiz", tags=["quiz"])


@router.get("/all", response_model=List[QuizOut])
async def list_quizzes(session: AsyncSession = Depends(get_session)):
    """List all quizzes"""
    return await quizzes.get_all_quizzes(session)


@router.get("/published", response_model=List[QuizOut])
async def list_published_quizzes(session: AsyncSession = Depends(get_session)):
    return await quizzes.get_published_quizzes(session)


@router.get("/category/{category}", response_model=List[QuizOut])
async def list_quizzes_by_category(category: str, session: AsyncSession = Depends(get_session)):
    return await quizzes.get_quizzes_by_category(session, category)


@router.get("/difficulty/{difficulty}", response_model=List[QuizOut])
async def list_quizzes_by_difficulty(difficulty: str, session: AsyncSession = Depends(get_session)):
    return await quizzes.get_quizzes_by_difficulty(session, difficulty)


@router.post("/create", response_model=QuizOut, status_code=status.HTTP_201_CREATED)
async def create_quiz(payload: QuizCreate, session: AsyncSession = Depends(get_session)):
    return await quizzes.create_quiz(session, payload)


@router.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(question_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    """Delete a question and decrement its quiz's question count"""
    await quizzes.delete_question(session, question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{quiz_id}", response_model=QuizOut)
async def get_quiz(quiz_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    quiz = await quizzes.get_quiz(session, quiz_id)
    if quiz is None:
        raise NotFoundError(f"Quiz '{quiz_id}' not found")
    return quiz


@router.put("/{quiz_id}", response_model=QuizOut)
async def update_quiz(quiz_id: uuid.UUID, payload: QuizUpdate, session: AsyncSession = Depends(get_session)):
    return await quizzes.update_quiz(session, quiz_id, payload)


@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz(quiz_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    """Delete a quiz and all of its questions"""
    await quizzes.delete_quiz(session, quiz_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{quiz_id}/questions", response_model=List[QuestionOut])
async def list_questions(quiz_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    """Questions of a quiz in display order"""
    return await quizzes.get_questions(session, quiz_id)


@router.post("/{quiz_id}/questions", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
async def add_question(quiz_id: uuid.UUID, payload: QuestionCreate, session: AsyncSession = Depends(get_session)):
    return await quizzes.add_question(session, quiz_id, payload)
