"""
Database models for QuizHub.

Defines SQLAlchemy models for accounts, profiles, quizzes, questions and
quiz attempts.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String, Text, Uuid

from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Login credentials for a registered account.

    The profile row shares the same id.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class Profile(Base):
    """
    Per-user statistics: points, completed quizzes and daily streaks.

    ``version`` is bumped on every UPDATE and checked in its WHERE clause,
    so concurrent read-modify-write cycles on the counters cannot silently
    overwrite each other.
    """
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    total_points = Column(Integer, default=0, nullable=False)
    quizzes_completed = Column(Integer, default=0, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_quiz_date = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=True)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index('idx_profiles_total_points', 'total_points'),
        Index('idx_profiles_current_streak', 'current_streak'),
    )

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email}, total_points={self.total_points})>"


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False)
    difficulty = Column(String(50), nullable=False)
    time_limit = Column(Integer, nullable=True)  # seconds
    passing_score = Column(Integer, default=70, nullable=False)
    total_questions = Column(Integer, default=0, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    created_by = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=True)

    __table_args__ = (
        Index('idx_quizzes_category', 'category'),
        Index('idx_quizzes_difficulty', 'difficulty'),
        Index('idx_quizzes_published', 'is_published'),
    )

    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title}, total_questions={self.total_questions})>"


class Question(Base):
    """
    A question belonging to one quiz.

    Questions are displayed in ``order_number`` order. ``options`` keeps the
    answer choices in their display order.
    """
    __tablename__ = "questions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    quiz_id = Column(Uuid, nullable=False)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(50), nullable=False)  # multiple_choice, true_false, fill_blank
    options = Column(JSON, nullable=True)
    correct_answer = Column(String(1024), nullable=False)
    explanation = Column(Text, nullable=True)
    points = Column(Integer, default=10, nullable=False)
    order_number = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_questions_quiz_order', 'quiz_id', 'order_number'),
    )

    def __repr__(self):
        return f"<Question(id={self.id}, quiz_id={self.quiz_id}, order_number={self.order_number})>"


class QuizAttempt(Base):
    """
    One user's run through a quiz.

    Created incomplete by start; submit fills in answers and score and marks
    it completed. A completed attempt is never re-opened.
    """
    __tablename__ = "quiz_attempts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    quiz_id = Column(Uuid, nullable=False)
    score = Column(Integer, default=0, nullable=False)
    total_questions = Column(Integer, default=0, nullable=False)
    correct_answers = Column(Integer, default=0, nullable=False)
    time_taken = Column(Integer, nullable=True)  # seconds
    answers = Column(JSON, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_quiz_attempts_user', 'user_id'),
        Index('idx_quiz_attempts_quiz', 'quiz_id'),
        Index('idx_quiz_attempts_completed_at', 'completed_at'),
    )

    def __repr__(self):
        return f"<QuizAttempt(id={self.id}, user_id={self.user_id}, quiz_id={self.quiz_id}, completed={self.completed})>"
