"""Learner progression state and level formula."""

import math
from datetime import date

from pydantic import BaseModel, Field, computed_field, model_validator

from lecture_quest.models.achievement import Achievement

XP_PER_LEVEL_UNIT = 100
MAX_SECOND_CHANCE = 10

LEVEL_TITLES: dict[int, str] = {
    1: "Knowledge Novice",
    2: "Study Starter",
    3: "Learning Explorer",
    4: "Quiz Challenger",
    5: "Knowledge Apprentice",
    6: "Study Scholar",
    7: "Knowledge Warrior",
    8: "Learning Champion",
    9: "Quiz Master",
    10: "Knowledge Master",
    11: "Wisdom Seeker",
    12: "Grand Scholar",
    13: "Learning Legend",
    14: "Knowledge Sage",
    15: "Ultimate Master",
}


def level_for_xp(total_xp: int) -> int:
    """Derive the level from total XP: max(1, floor(sqrt(total_xp / 100))).

    Uses integer square root so the result is exact for every XP value.
    """
    total_xp = max(0, int(total_xp))
    return max(1, math.isqrt(total_xp // XP_PER_LEVEL_UNIT))


def xp_threshold(level: int) -> int:
    """Total XP at which ``level`` is reached."""
    return level * level * XP_PER_LEVEL_UNIT


def xp_for_next_level(level: int) -> int:
    """Total XP needed to reach ``level + 1``."""
    return xp_threshold(level + 1)


def level_title(level: int) -> str:
    return LEVEL_TITLES[max(1, min(level, 15))]


class PowerUps(BaseModel):
    """Consumable power-up charges."""

    second_chance: int = Field(default=0, ge=0)
    hints: int = Field(default=0, ge=0)
    double_xp: bool = False


class QuizStats(BaseModel):
    """Running quiz counters kept between sessions."""

    quizzes_completed: int = Field(default=0, ge=0)
    perfect_scores: int = Field(default=0, ge=0)
    perfect_streak: int = Field(default=0, ge=0)
    consecutive_improvements: int = Field(default=0, ge=0)
    daily_quizzes_completed: int = Field(default=0, ge=0)
    daily_quiz_streak: int = Field(default=0, ge=0)
    daily_perfect_streak: int = Field(default=0, ge=0)
    last_daily_quiz_on: date | None = None


class UserProgressState(BaseModel):
    """XP, streak and achievement state for one learner.

    ``level`` is derived from ``total_xp`` on every read and is never stored
    independently; a ``level`` key in input data is ignored.
    """

    total_xp: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_activity_on: date | None = None
    total_lectures: int = Field(default=0, ge=0)
    average_confidence: float = Field(default=0.0, ge=0.0)
    mastered_topics: list[str] = Field(default_factory=list)
    needs_practice: list[str] = Field(default_factory=list)
    power_ups: PowerUps = Field(default_factory=PowerUps)
    stats: QuizStats = Field(default_factory=QuizStats)
    achievements: list[Achievement] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def level(self) -> int:
        return level_for_xp(self.total_xp)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def xp_to_next_level(self) -> int:
        return xp_for_next_level(self.level) - self.total_xp

    @model_validator(mode="after")
    def _check_invariants(self) -> "UserProgressState":
        self.longest_streak = max(self.longest_streak, self.current_streak)
        mastered = set(self.mastered_topics)
        self.needs_practice = [t for t in self.needs_practice if t not in mastered]
        return self

    def achievement(self, achievement_id: str) -> Achievement | None:
        for item in self.achievements:
            if item.id == achievement_id:
                return item
        return None
