"""Topic review ledger models."""

from datetime import date, datetime

from pydantic import BaseModel, Field

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


class TopicReviewRecord(BaseModel):
    """Spaced-repetition state for one topic of one learner."""

    topic: str = Field(min_length=1)
    source_lecture_id: str = ""
    source_lecture_title: str = ""
    last_reviewed_on: date
    last_score: int = Field(default=0, ge=0, le=100)
    review_count: int = Field(default=1, ge=0)
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    interval_days: int = Field(default=1, ge=1)
    next_due_on: date
    streak: int = Field(default=0, ge=0)  # consecutive reviews scoring >= 70

    def is_due(self, today: date) -> bool:
        return today >= self.next_due_on

    def days_overdue(self, today: date) -> int:
        """Whole days past the due date (negative when not yet due)."""
        return (today - self.next_due_on).days


class ReviewEvent(BaseModel):
    """A single scored review of a topic."""

    topic: str
    lecture_id: str = ""
    reviewed_at: datetime = Field(default_factory=datetime.now)
    score: int = Field(ge=0, le=100)
    was_correct: bool
    response_seconds: float | None = None
