"""Achievement definition and per-learner state models."""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class AchievementCategory(StrEnum):
    """Families of unlock conditions."""

    STUDY = "study"
    PERFECT = "perfect"
    STREAK = "streak"
    TIME = "time"
    IMPROVEMENT = "improvement"
    MASTERY = "mastery"
    SOCIAL = "social"
    DAILY = "daily"
    SPECIAL = "special"


class AchievementDefinition(BaseModel):
    """Static, immutable achievement metadata."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: AchievementCategory
    xp_reward: int = Field(default=0, ge=0)
    max_progress: int = Field(default=1, ge=1)


class Achievement(BaseModel):
    """An achievement definition joined with one learner's unlock state."""

    id: str
    name: str = ""
    description: str = ""
    category: AchievementCategory = AchievementCategory.SPECIAL
    xp_reward: int = 0
    max_progress: int = Field(default=1, ge=1)
    unlocked: bool = False
    unlocked_on: date | None = None
    progress: int = Field(default=0, ge=0)

    @classmethod
    def from_definition(cls, definition: AchievementDefinition) -> "Achievement":
        """Create locked, zero-progress state for a definition."""
        return cls(**definition.model_dump())

    @property
    def progress_percent(self) -> float:
        return round(min(self.progress, self.max_progress) / self.max_progress * 100, 1)
