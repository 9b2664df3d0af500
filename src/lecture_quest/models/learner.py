"""Per-learner state bundle read and written as a unit."""

from pydantic import BaseModel, Field

from lecture_quest.models.history import QuizHistory
from lecture_quest.models.plan import DailyQuizPlan
from lecture_quest.models.progress import UserProgressState
from lecture_quest.models.review import TopicReviewRecord


class LearnerState(BaseModel):
    user_id: str
    profile: UserProgressState = Field(default_factory=UserProgressState)
    ledger: list[TopicReviewRecord] = Field(default_factory=list)
    history: QuizHistory = Field(default_factory=QuizHistory)
    daily_plan: DailyQuizPlan | None = None

    def record(self, topic: str) -> TopicReviewRecord | None:
        for item in self.ledger:
            if item.topic == topic:
                return item
        return None

    @property
    def active_plan(self) -> DailyQuizPlan | None:
        if self.daily_plan is not None and self.daily_plan.is_active:
            return self.daily_plan
        return None
