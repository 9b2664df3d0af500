"""Quiz submission coordinator.

Ties the scheduler, ranker, calculator and achievement evaluator together
for one learner. Every function takes a ``LearnerState`` and returns a new
one; nothing here touches storage.
"""

from datetime import date, datetime, time

import structlog
from pydantic import BaseModel, Field, model_validator

from lecture_quest.models.achievement import Achievement
from lecture_quest.models.context import SessionContext
from lecture_quest.models.history import DailyQuizAttempt, LectureRecord, QuizHistory
from lecture_quest.models.learner import LearnerState
from lecture_quest.models.plan import DailyQuizPlan
from lecture_quest.models.progress import UserProgressState
from lecture_quest.models.review import ReviewEvent, TopicReviewRecord
from lecture_quest.progression.achievements import evaluate
from lecture_quest.progression.calculator import (
    XPAward,
    apply_level_up_rewards,
    apply_quiz_power_ups,
    award_xp,
    calculate_quiz_xp,
    confidence_xp,
    update_quiz_stats,
    update_study_streak,
    update_topic_sets,
)
from lecture_quest.progression.catalog import ACHIEVEMENT_DEFINITIONS, initial_achievements
from lecture_quest.progression.ranker import DEFAULT_LIMIT, build_daily_plan, complete_daily_plan
from lecture_quest.progression.scheduler import PASSING_SCORE, schedule

logger = structlog.get_logger()


class QuizSubmission(BaseModel):
    """A completed quiz: either on a lecture or on the active daily plan."""

    correct_count: int = Field(ge=0)
    total_questions: int = Field(ge=1)
    topic_scores: dict[str, int] = Field(default_factory=dict)
    incorrect_topics: list[str] = Field(default_factory=list)
    lecture_id: str | None = None
    lecture_title: str = ""
    plan_id: str | None = None
    previous_accuracy: float | None = Field(default=None, ge=0, le=100)
    confidence_rating: int = Field(default=0, ge=0, le=5)
    taken_at: datetime | None = None

    @model_validator(mode="after")
    def _check_target(self) -> "QuizSubmission":
        if self.correct_count > self.total_questions:
            raise ValueError("correct_count cannot exceed total_questions")
        if (self.lecture_id is None) == (self.plan_id is None):
            raise ValueError("Exactly one of lecture_id or plan_id is required")
        return self

    @property
    def accuracy(self) -> int:
        return round(self.correct_count / self.total_questions * 100)

    @property
    def is_perfect(self) -> bool:
        return self.correct_count == self.total_questions

    @property
    def is_daily(self) -> bool:
        return self.plan_id is not None


class QuizOutcome(BaseModel):
    state: LearnerState
    award: XPAward
    quiz_xp: int
    achievement_xp: int
    newly_unlocked: list[Achievement] = Field(default_factory=list)
    rewards: list[str] = Field(default_factory=list)
    review_events: list[ReviewEvent] = Field(default_factory=list)

    @property
    def xp_earned(self) -> int:
        return self.award.amount

    @property
    def level_ups(self) -> int:
        return self.award.levels_gained


class ConfidenceOutcome(BaseModel):
    state: LearnerState
    award: XPAward
    newly_unlocked: list[Achievement] = Field(default_factory=list)


def new_learner_state(user_id: str) -> LearnerState:
    profile = UserProgressState(achievements=initial_achievements())
    return LearnerState(user_id=user_id, profile=profile)


def reset_learner(user_id: str) -> LearnerState:
    """Full profile reset: XP, ledger, history and plan all start over."""
    logger.info("learner_reset", user_id=user_id)
    return new_learner_state(user_id)


def sync_achievements(profile: UserProgressState) -> UserProgressState:
    """Append catalog achievements missing from a stored profile."""
    known = {achievement.id for achievement in profile.achievements}
    missing = [
        Achievement.from_definition(definition)
        for definition in ACHIEVEMENT_DEFINITIONS
        if definition.id not in known
    ]
    if not missing:
        return profile
    return profile.model_copy(update={"achievements": [*profile.achievements, *missing]})


def _merge_awards(first: XPAward, second: XPAward) -> XPAward:
    return XPAward(
        amount=first.amount + second.amount,
        previous_total=first.previous_total,
        new_total=second.new_total,
        previous_level=first.previous_level,
        new_level=second.new_level,
    )


def _average_confidence(history: QuizHistory) -> float:
    ratings = [lecture.confidence_rating for lecture in history.lectures if lecture.confidence_rating]
    if not ratings:
        return 0.0
    return round(sum(ratings) / len(ratings), 2)


def _topic_scores(
    submission: QuizSubmission, plan: DailyQuizPlan | None
) -> dict[str, int]:
    """Per-topic scores; planned topics without an explicit score take the quiz accuracy."""
    scores = dict(submission.topic_scores)
    if plan is not None:
        for planned in plan.topics:
            scores.setdefault(planned.topic, submission.accuracy)
    return scores


def _update_ledger(
    ledger: list[TopicReviewRecord],
    scores: dict[str, int],
    today: date,
    submission: QuizSubmission,
    plan: DailyQuizPlan | None,
    reviewed_at: datetime,
) -> tuple[list[TopicReviewRecord], list[ReviewEvent]]:
    by_topic = {record.topic: index for index, record in enumerate(ledger)}
    updated = list(ledger)
    events = []
    for topic, score in scores.items():
        planned = plan.planned(topic) if plan is not None else None
        if planned is not None:
            lecture_id, lecture_title = planned.source_lecture_id, planned.source_lecture_title
        else:
            lecture_id, lecture_title = submission.lecture_id or "", submission.lecture_title
        index = by_topic.get(topic)
        existing = updated[index] if index is not None else None
        record = schedule(
            existing,
            score,
            today,
            topic=topic,
            lecture_id=lecture_id,
            lecture_title=lecture_title,
        )
        if index is None:
            by_topic[topic] = len(updated)
            updated.append(record)
        else:
            updated[index] = record
        events.append(
            ReviewEvent(
                topic=topic,
                lecture_id=record.source_lecture_id,
                reviewed_at=reviewed_at,
                score=record.last_score,
                was_correct=record.last_score >= PASSING_SCORE,
            )
        )
    return updated, events


def _update_history(
    history: QuizHistory,
    submission: QuizSubmission,
    plan: DailyQuizPlan | None,
    today: date,
    taken_at: datetime,
    xp: int,
) -> QuizHistory:
    lectures = list(history.lectures)
    if plan is None:
        lecture = history.lecture(submission.lecture_id)
        fields = {
            "review_score": submission.accuracy,
            "incorrect_topics": list(dict.fromkeys(submission.incorrect_topics)),
        }
        if submission.confidence_rating:
            fields["confidence_rating"] = submission.confidence_rating
        if lecture is None:
            lectures.append(
                LectureRecord(
                    id=submission.lecture_id,
                    title=submission.lecture_title,
                    studied_on=today,
                    questions_answered=submission.total_questions,
                    xp_earned=xp,
                    **fields,
                )
            )
        else:
            fields["questions_answered"] = lecture.questions_answered + submission.total_questions
            fields["xp_earned"] = lecture.xp_earned + xp
            if submission.lecture_title:
                fields["title"] = submission.lecture_title
            lectures[lectures.index(lecture)] = lecture.model_copy(update=fields)
        return history.model_copy(update={"lectures": lectures})

    # One attempt per daily quiz, filed under the highest-priority planned
    # topic whose lecture is on record.
    for planned in plan.topics:
        lecture = history.lecture(planned.source_lecture_id) if planned.source_lecture_id else None
        if lecture is None:
            continue
        attempt = DailyQuizAttempt(taken_at=taken_at, score=submission.accuracy, xp_earned=xp)
        lectures[lectures.index(lecture)] = lecture.model_copy(
            update={"daily_quizzes": [*lecture.daily_quizzes, attempt]}
        )
        break
    return history.model_copy(update={"lectures": lectures})


def _is_improvement(submission: QuizSubmission, history: QuizHistory) -> bool:
    previous = submission.previous_accuracy
    if previous is None and submission.lecture_id is not None:
        lecture = history.lecture(submission.lecture_id)
        if lecture is not None:
            previous = lecture.last_score
    return previous is not None and submission.accuracy > previous


def record_quiz(
    state: LearnerState,
    submission: QuizSubmission,
    context: SessionContext | None = None,
) -> QuizOutcome:
    """Apply a completed quiz to a learner's state.

    XP is computed from the streak as it stood before this quiz. Topic
    scores are scheduled, power-ups, stats, topic sets and the study streak
    are updated, the quiz is written into the lecture history, and the
    achievements are evaluated against the result. Achievement XP is folded
    into the same award so level-up rewards cover both.

    Raises:
        ValueError: If ``plan_id`` does not name the learner's active plan.
    """
    context = context or SessionContext()
    today = context.today
    taken_at = submission.taken_at or datetime.combine(today, time(hour=context.current_hour or 0))

    plan = None
    if submission.is_daily:
        plan = state.active_plan
        if plan is None or plan.id != submission.plan_id:
            raise ValueError(f"No active daily quiz plan with id {submission.plan_id}")

    profile = sync_achievements(state.profile)
    is_improvement = _is_improvement(submission, state.history)
    quiz_xp = calculate_quiz_xp(
        submission.correct_count,
        submission.total_questions,
        is_perfect=submission.is_perfect,
        confidence_rating=submission.confidence_rating,
        is_improvement=is_improvement,
        current_streak=profile.current_streak,
        double_xp_active=profile.power_ups.double_xp,
    )
    profile, quiz_award = award_xp(profile, quiz_xp)

    ledger, events = _update_ledger(
        state.ledger, _topic_scores(submission, plan), today, submission, plan, taken_at
    )

    profile = apply_quiz_power_ups(profile, submission.is_perfect)
    profile = update_quiz_stats(
        profile,
        is_perfect=submission.is_perfect,
        is_improvement=is_improvement,
        is_daily=submission.is_daily,
        today=today,
    )
    profile = update_topic_sets(profile, ledger, submission.incorrect_topics)
    profile = update_study_streak(profile, today)

    history = _update_history(state.history, submission, plan, today, taken_at, quiz_xp)
    profile = profile.model_copy(
        update={
            "total_lectures": len(history.lectures),
            "average_confidence": _average_confidence(history),
        }
    )

    daily_plan = state.daily_plan
    if plan is not None:
        daily_plan = complete_daily_plan(plan, submission.accuracy, today)

    result = evaluate(profile, ledger, history, context)
    profile = profile.model_copy(update={"achievements": result.achievements})
    profile, bonus_award = award_xp(profile, result.xp_reward)
    award = _merge_awards(quiz_award, bonus_award)
    profile, rewards = apply_level_up_rewards(profile, award)

    logger.info(
        "quiz_recorded",
        user_id=state.user_id,
        daily=submission.is_daily,
        accuracy=submission.accuracy,
        xp_earned=award.amount,
        topics_scheduled=len(events),
    )
    if award.leveled_up:
        logger.info("level_up", user_id=state.user_id, new_level=award.new_level)

    new_state = state.model_copy(
        update={"profile": profile, "ledger": ledger, "history": history, "daily_plan": daily_plan}
    )
    return QuizOutcome(
        state=new_state,
        award=award,
        quiz_xp=quiz_xp,
        achievement_xp=result.xp_reward,
        newly_unlocked=result.newly_unlocked,
        rewards=rewards,
        review_events=events,
    )


def record_confidence(
    state: LearnerState,
    lecture_id: str,
    rating: int,
    context: SessionContext | None = None,
) -> ConfidenceOutcome:
    """Store a lecture confidence rating and grant its XP.

    Raises:
        KeyError: If the lecture is not in the learner's history.
        ValueError: If ``rating`` is outside 1-5.
    """
    if not 1 <= rating <= 5:
        raise ValueError("Confidence rating must be between 1 and 5")
    lecture = state.history.lecture(lecture_id)
    if lecture is None:
        raise KeyError(lecture_id)
    context = context or SessionContext()

    lectures = list(state.history.lectures)
    lectures[lectures.index(lecture)] = lecture.model_copy(update={"confidence_rating": rating})
    history = state.history.model_copy(update={"lectures": lectures})

    profile = sync_achievements(state.profile)
    profile, award = award_xp(profile, confidence_xp(rating))
    profile = profile.model_copy(update={"average_confidence": _average_confidence(history)})

    result = evaluate(profile, state.ledger, history, context)
    profile = profile.model_copy(update={"achievements": result.achievements})
    profile, bonus_award = award_xp(profile, result.xp_reward)
    award = _merge_awards(award, bonus_award)
    profile, _ = apply_level_up_rewards(profile, award)

    logger.info("confidence_recorded", user_id=state.user_id, lecture_id=lecture_id, rating=rating)
    return ConfidenceOutcome(
        state=state.model_copy(update={"profile": profile, "history": history}),
        award=award,
        newly_unlocked=result.newly_unlocked,
    )


def generate_daily_plan(
    state: LearnerState, today: date, limit: int = DEFAULT_LIMIT
) -> tuple[LearnerState, DailyQuizPlan]:
    """Return the learner's active plan, building one if none is open.

    Raises:
        ValueError: If there is nothing to review.
    """
    active = state.active_plan
    if active is not None:
        return state, active
    plan = build_daily_plan(state.ledger, state.history, today, limit)
    logger.info("daily_plan_generated", user_id=state.user_id, plan_id=plan.id, topics=len(plan.topics))
    return state.model_copy(update={"daily_plan": plan}), plan
