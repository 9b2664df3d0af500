"""Topic priority ranking and daily review quiz planning."""

from datetime import date

import structlog

from lecture_quest.models.history import QuizHistory
from lecture_quest.models.plan import DailyQuizPlan, PlannedTopic, ReviewReason
from lecture_quest.models.review import TopicReviewRecord

logger = structlog.get_logger()

DEFAULT_LIMIT = 10
EARLY_REVIEW_PRIORITY = 50.0
OVERDUE_REASON_DAYS = 3
WEAK_SCORE = 70


def topic_priority(record: TopicReviewRecord, today: date) -> float:
    """Compute how urgently a topic should be reviewed (higher is sooner).

    Combines overdue-ness, the most recent score, the ease factor and the
    topic streak.
    """
    days_overdue = record.days_overdue(today)
    priority = 0.0
    if days_overdue > 0:
        priority += 100 + days_overdue * 10
    elif days_overdue == 0:
        priority += 80
    priority += max(0.0, 50 - record.last_score / 2)
    priority += max(0.0, (2.5 - record.ease_factor) * 20)
    priority += max(0, (5 - record.streak) * 5)
    return priority


def _ranked(
    ledger: list[TopicReviewRecord], today: date
) -> list[tuple[TopicReviewRecord, float]]:
    candidates = []
    for record in ledger:
        priority = topic_priority(record, today)
        if record.days_overdue(today) >= 0 or priority > EARLY_REVIEW_PRIORITY:
            candidates.append((record, priority))
    # sorted() is stable: equal priorities keep ledger order
    return sorted(candidates, key=lambda item: item[1], reverse=True)


def rank_due(
    ledger: list[TopicReviewRecord], today: date, limit: int = DEFAULT_LIMIT
) -> list[TopicReviewRecord]:
    """Select the topics for the next review, most urgent first.

    A topic qualifies when it is due (or overdue), or when its priority
    exceeds 50 even though it is not yet due.
    """
    return [record for record, _ in _ranked(ledger, today)[: max(0, limit)]]


def review_reason(record: TopicReviewRecord, today: date) -> ReviewReason:
    if record.days_overdue(today) > OVERDUE_REASON_DAYS:
        return ReviewReason.OVERDUE
    if record.last_score < WEAK_SCORE:
        return ReviewReason.WEAK
    if record.review_count <= 1:
        return ReviewReason.NEW
    return ReviewReason.DUE


def _weak_lecture_topics(history: QuizHistory, limit: int) -> list[PlannedTopic]:
    """Fallback selection for learners with no review ledger yet.

    Each incorrectly answered topic is attributed to the lecture where it
    scored worst.
    """
    weakest: dict[str, tuple[str, str, int]] = {}
    for lecture in history.lectures:
        for topic in lecture.incorrect_topics:
            seen = weakest.get(topic)
            if seen is None or seen[2] > lecture.review_score:
                weakest[topic] = (lecture.id, lecture.title, lecture.review_score)
    planned = [
        PlannedTopic(
            topic=topic,
            source_lecture_id=lecture_id,
            source_lecture_title=title,
            priority_score=float(100 - score),
            reason=ReviewReason.WEAK,
        )
        for topic, (lecture_id, title, score) in weakest.items()
    ]
    planned.sort(key=lambda item: item.priority_score, reverse=True)
    return planned[:limit]


def build_daily_plan(
    ledger: list[TopicReviewRecord],
    history: QuizHistory,
    today: date,
    limit: int = DEFAULT_LIMIT,
) -> DailyQuizPlan:
    """Assemble a daily quiz plan from the ledger (or lecture history).

    Raises:
        ValueError: If there is nothing to review yet.
    """
    topics = [
        PlannedTopic(
            topic=record.topic,
            source_lecture_id=record.source_lecture_id,
            source_lecture_title=record.source_lecture_title,
            priority_score=priority,
            reason=review_reason(record, today),
            days_since_review=max(0, (today - record.last_reviewed_on).days),
        )
        for record, priority in _ranked(ledger, today)[: max(0, limit)]
    ]
    if not topics:
        topics = _weak_lecture_topics(history, max(0, limit))
        if topics:
            logger.info("daily_plan_from_lecture_history", topic_count=len(topics))
    if not topics:
        raise ValueError("No topics to review: complete a lecture quiz first")
    return DailyQuizPlan(generated_on=today, topics=topics)


def complete_daily_plan(plan: DailyQuizPlan, score: int, today: date) -> DailyQuizPlan:
    """Return a completed copy of ``plan`` carrying its final score."""
    if plan.completed:
        raise ValueError(f"Daily quiz plan {plan.id} is already completed")
    return plan.model_copy(
        update={
            "completed": True,
            "completed_on": today,
            "score": max(0, min(100, int(score))),
        }
    )
