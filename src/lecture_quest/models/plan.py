"""Daily review quiz plan models."""

import uuid
from datetime import date
from enum import StrEnum

from pydantic import BaseModel, Field


class ReviewReason(StrEnum):
    """Why a topic was picked for the daily quiz."""

    DUE = "due"
    OVERDUE = "overdue"
    WEAK = "weak"
    NEW = "new"


class PlannedTopic(BaseModel):
    topic: str
    source_lecture_id: str = ""
    source_lecture_title: str = ""
    priority_score: float
    reason: ReviewReason
    days_since_review: int = 0


class DailyQuizPlan(BaseModel):
    """A generated set of topics for one daily review quiz."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    generated_on: date
    topics: list[PlannedTopic] = Field(default_factory=list)
    completed: bool = False
    completed_on: date | None = None
    score: int | None = Field(default=None, ge=0, le=100)

    @property
    def is_active(self) -> bool:
        return not self.completed

    def planned(self, topic: str) -> PlannedTopic | None:
        for item in self.topics:
            if item.topic == topic:
                return item
        return None
