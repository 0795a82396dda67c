"""Request and response models for the HTTP API (camelCase on the wire)."""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------- Auth ----------

class RegisterRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class LoginRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(ApiModel):
    user_id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    token: str


class ValidateResponse(ApiModel):
    valid: bool
    email: Optional[str] = None


# ---------- Profiles ----------

class ProfileCreate(ApiModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileSyncRequest(ApiModel):
    user_id: Optional[uuid.UUID] = None
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(ApiModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileOut(ApiModel):
    id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    total_points: int
    quizzes_completed: int
    current_streak: int
    longest_streak: int
    last_quiz_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class LeaderboardResponse(ApiModel):
    success: bool = True
    leaderboard: List[ProfileOut]
    total: int


# ---------- Quizzes ----------

class QuizCreate(ApiModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: str = Field(min_length=1)
    difficulty: str = Field(min_length=1)
    time_limit: Optional[int] = Field(default=None, ge=0)
    passing_score: int = Field(default=70, ge=0)
    is_published: bool = False
    created_by: uuid.UUID


class QuizUpdate(ApiModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    time_limit: Optional[int] = Field(default=None, ge=0)
    passing_score: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class QuizOut(ApiModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    category: str
    difficulty: str
    time_limit: Optional[int] = None
    passing_score: int
    total_questions: int
    is_published: bool
    created_by: uuid.UUID
    created_at: datetime
    updated_at: Optional[datetime] = None


class QuestionCreate(ApiModel):
    question_text: str = Field(min_length=1)
    question_type: str = Field(min_length=1)
    options: Optional[List[str]] = None
    correct_answer: str
    explanation: Optional[str] = None
    points: int = Field(default=10, ge=0)
    order_number: int


class QuestionOut(ApiModel):
    id: uuid.UUID
    quiz_id: uuid.UUID
    question_text: str
    question_type: str
    options: Optional[List[str]] = None
    correct_answer: str
    explanation: Optional[str] = None
    points: int
    order_number: int
    created_at: datetime


# ---------- Attempts ----------

class AttemptStart(ApiModel):
    user_id: uuid.UUID
    quiz_id: uuid.UUID
    total_questions: Optional[int] = Field(default=None, ge=0)


class AttemptSubmit(ApiModel):
    answers: Optional[Dict[str, Any]] = None
    score: int = 0
    correct_answers: int = Field(default=0, ge=0)
    time_taken: Optional[int] = Field(default=None, ge=0)


class AttemptOut(ApiModel):
    id: uuid.UUID
    user_id: uuid.UUID
    quiz_id: uuid.UUID
    score: int
    total_questions: int
    correct_answers: int
    time_taken: Optional[int] = None
    answers: Optional[Dict[str, Any]] = None
    completed: bool
    completed_at: Optional[datetime] = None
    created_at: datetime
