"""Lecture and quiz history models."""

from datetime import UTC, date, datetime

from pydantic import BaseModel, Field, field_validator


class DailyQuizAttempt(BaseModel):
    """One daily review quiz taken on a lecture's material."""

    taken_at: datetime
    score: int = Field(ge=0, le=100)
    xp_earned: int = Field(default=0, ge=0)

    @field_validator("taken_at")
    @classmethod
    def _as_naive_utc(cls, value: datetime) -> datetime:
        """Aware timestamps are stored as naive UTC."""
        if value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value


class LectureRecord(BaseModel):
    """An uploaded lecture and its quiz outcomes."""

    id: str
    title: str = ""
    studied_on: date
    review_score: int = Field(default=0, ge=0, le=100)
    questions_answered: int = Field(default=0, ge=0)
    xp_earned: int = Field(default=0, ge=0)
    incorrect_topics: list[str] = Field(default_factory=list)
    confidence_rating: int = Field(default=0, ge=0, le=5)
    daily_quizzes: list[DailyQuizAttempt] = Field(default_factory=list)

    @property
    def chronological_quizzes(self) -> list[DailyQuizAttempt]:
        """Daily attempts ordered by ``taken_at`` (stable for equal timestamps)."""
        return sorted(self.daily_quizzes, key=lambda attempt: attempt.taken_at)

    def score_deltas(self) -> list[int]:
        """Score change of each daily attempt against the attempt before it.

        The first attempt is compared with the lecture's own review score.
        """
        deltas = []
        previous = self.review_score
        for attempt in self.chronological_quizzes:
            deltas.append(attempt.score - previous)
            previous = attempt.score
        return deltas

    @property
    def last_score(self) -> int:
        quizzes = self.chronological_quizzes
        return quizzes[-1].score if quizzes else self.review_score


class QuizHistory(BaseModel):
    """All lectures studied by one learner, in upload order."""

    lectures: list[LectureRecord] = Field(default_factory=list)

    def lecture(self, lecture_id: str) -> LectureRecord | None:
        for lecture in self.lectures:
            if lecture.id == lecture_id:
                return lecture
        return None

    @property
    def daily_attempt_count(self) -> int:
        return sum(len(lecture.daily_quizzes) for lecture in self.lectures)
