"""Session facts supplied by the host application."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field


class PowerUpUsage(BaseModel):
    """Which power-ups the learner has used at least once."""

    second_chance: bool = False
    hints: bool = False
    double_xp: bool = False

    @property
    def kinds_used(self) -> int:
        return sum([self.second_chance, self.hints, self.double_xp])


class SessionContext(BaseModel):
    """Facts about the current session that the engine cannot derive itself.

    Every field defaults to zero, false or None so that a host without a
    social graph, calendar or clock wiring can still evaluate achievements.
    ``day_of_week`` follows ``date.weekday()``: Monday is 0, Sunday is 6.
    """

    today: date = Field(default_factory=date.today)
    current_hour: int | None = Field(default=None, ge=0, le=23)
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    day_of_month: int | None = Field(default=None, ge=1, le=31)

    # Counters the host may track; None falls back to the learner's stats.
    perfect_scores: int | None = Field(default=None, ge=0)
    total_quizzes_completed: int | None = Field(default=None, ge=0)
    daily_quizzes_completed: int | None = Field(default=None, ge=0)

    perfect_streak: int | None = Field(default=None, ge=0)
    daily_quiz_streak: int | None = Field(default=None, ge=0)
    daily_perfect_streak: int | None = Field(default=None, ge=0)
    consecutive_improvements: int | None = Field(default=None, ge=0)
    morning_streak: int = Field(default=0, ge=0)

    friends_count: int = Field(default=0, ge=0)
    leaderboard_rank: int | None = Field(default=None, ge=1)
    friend_challenges_won: int = Field(default=0, ge=0)
    study_buddy_sessions: int = Field(default=0, ge=0)
    invites_accepted: int = Field(default=0, ge=0)

    calendar_connected: bool = False
    batch_upload_count: int = Field(default=0, ge=0)
    power_ups_used: PowerUpUsage = Field(default_factory=PowerUpUsage)

    @classmethod
    def at(cls, moment: datetime, **fields: Any) -> "SessionContext":
        """Build a context whose calendar fields are taken from ``moment``."""
        return cls(
            today=moment.date(),
            current_hour=moment.hour,
            day_of_week=moment.weekday(),
            day_of_month=moment.day,
            **fields,
        )
