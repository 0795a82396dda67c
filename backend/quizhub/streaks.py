"""
Profile statistics and daily streak rules.

A streak counts consecutive UTC calendar days with at least one completed
quiz. Completing a quiz:

- the day after the last one continues the streak,
- on the same day as the last one leaves the streak as it is,
- after a longer gap (or for the first time) starts a new streak of 1.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from .models import Profile


def calendar_day(moment: datetime) -> date:
    """UTC calendar date of a timestamp; naive values are taken as UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def next_streak(current_streak: int, last_quiz_day: Optional[date], today: date) -> int:
    if last_quiz_day is not None and last_quiz_day == today - timedelta(days=1):
        return current_streak + 1
    if last_quiz_day is None or last_quiz_day != today:
        return 1
    return current_streak


def apply_stats(profile: Profile, points_earned: int, completed: bool, now: datetime) -> Profile:
    """
    Credit points and, for a completed quiz, advance the streak counters.

    Mutates ``profile`` in place; persisting it is up to the caller.
    """
    profile.total_points = (profile.total_points or 0) + points_earned

    if completed:
        profile.quizzes_completed = (profile.quizzes_completed or 0) + 1

        last_quiz_day = calendar_day(profile.last_quiz_date) if profile.last_quiz_date else None
        profile.current_streak = next_streak(profile.current_streak or 0, last_quiz_day, calendar_day(now))
        profile.longest_streak = max(profile.longest_streak or 0, profile.current_streak)
        profile.last_quiz_date = now

    profile.updated_at = now
    return profile
