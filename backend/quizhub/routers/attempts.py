import uuid
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from .. import attempts
from ..database import get_session
from ..errors import NotFoundError
from ..schemas import AttemptOut, AttemptStart, AttemptSubmit

router = APIRouter(prefix="/attempts", tags=["attempts"])


@router.get("/all", response_model=List[AttemptOut])
async def list_attempts(session: AsyncSession = Depends(get_session)):
    return await attempts.get_all_attempts(session)


@router.get("/user/{user_id}", response_model=List[AttemptOut])
async def list_user_attempts(user_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await attempts.get_attempts_by_user(session, user_id)


@router.get("/user/{user_id}/completed", response_model=List[AttemptOut])
async def list_user_completed_attempts(user_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await attempts.get_completed_attempts_by_user(session, user_id)


@router.get("/quiz/{quiz_id}", response_model=List[AttemptOut])
async def list_quiz_attempts(quiz_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await attempts.get_attempts_by_quiz(session, quiz_id)


@router.get("/quiz/{quiz_id}/top-scores", response_model=List[AttemptOut])
async def list_top_scores(quiz_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return await attempts.get_top_scores(session, quiz_id)


@router.post("/start", response_model=AttemptOut, status_code=status.HTTP_201_CREATED)
async def start_attempt(payload: AttemptStart, session: AsyncSession = Depends(get_session)):
    return await attempts.start_attempt(session, payload)


@router.put("/{attempt_id}/submit", response_model=AttemptOut)
async def submit_attempt(attempt_id: uuid.UUID, payload: AttemptSubmit, session: AsyncSession = Depends(get_session)):
    """Complete an attempt and credit the score to the user's profile"""
    return await attempts.submit_attempt(session, attempt_id, payload)


@router.get("/{attempt_id}", response_model=AttemptOut)
async def get_attempt(attempt_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    attempt = await attempts.get_attempt(session, attempt_id)
    if attempt is None:
        raise NotFoundError(f"Attempt '{attempt_id}' not found")
    return attempt


@router.delete("/{attempt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attempt(attempt_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    await attempts.delete_attempt(session, attempt_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
