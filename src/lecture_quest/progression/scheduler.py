"""SM-2 derived spaced repetition scheduling for topics."""

import math
from datetime import date, timedelta

from lecture_quest.models.review import (
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    TopicReviewRecord,
)

# Base intervals (days) indexed by topic streak, scaled by ease factor
INTERVAL_LADDER: tuple[int, ...] = (1, 3, 7, 14, 30, 60, 90)
PASSING_SCORE = 70
FAILING_QUALITY = 3


def score_to_quality(score: float) -> int:
    """Map a 0-100 score to the 0-5 SM-2 quality scale.

    Rounds half up, so 90 maps to 5 and 50 maps to 3.
    """
    score = max(0.0, min(100.0, float(score)))
    return math.floor(score / 100 * 5 + 0.5)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """Apply the SM-2 ease update with a floor of 1.3."""
    miss = 5 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def next_interval(quality: int, streak: int, ease_factor: float) -> int:
    """Pick the next interval in days.

    Args:
        quality: SM-2 quality of the review (0-5).
        streak: Topic streak after this review.
        ease_factor: Ease factor after this review.

    Returns:
        Interval in days, always at least 1.
    """
    if quality < FAILING_QUALITY:
        return 1
    if streak == 0:
        return 1
    if streak == 1:
        return 3
    base = INTERVAL_LADDER[min(streak, len(INTERVAL_LADDER) - 1)]
    return max(1, math.floor(base * ease_factor + 0.5))


def schedule(
    existing: TopicReviewRecord | None,
    score: int,
    today: date,
    *,
    topic: str | None = None,
    lecture_id: str = "",
    lecture_title: str = "",
) -> TopicReviewRecord:
    """Compute the review record that results from scoring ``score`` today.

    Pure: ``existing`` is never modified. When ``existing`` is None the topic
    starts at ease 2.5, interval 0 and streak 0, and ``topic`` names it;
    ``lecture_id`` and ``lecture_title`` record where it was introduced.
    Scores outside 0-100 are clamped.
    """
    score = max(0, min(100, int(score)))
    if existing is None:
        if not topic:
            raise ValueError("topic is required for a first review")
        ease, streak, review_count = DEFAULT_EASE_FACTOR, 0, 0
    else:
        ease, streak, review_count = existing.ease_factor, existing.streak, existing.review_count

    quality = score_to_quality(score)
    new_ease = next_ease_factor(ease, quality)
    new_streak = streak + 1 if score >= PASSING_SCORE else 0
    interval = next_interval(quality, new_streak, new_ease)

    if existing is None:
        return TopicReviewRecord(
            topic=topic,
            source_lecture_id=lecture_id,
            source_lecture_title=lecture_title,
            last_reviewed_on=today,
            last_score=score,
            review_count=1,
            ease_factor=new_ease,
            interval_days=interval,
            next_due_on=today + timedelta(days=interval),
            streak=new_streak,
        )
    return existing.model_copy(
        update={
            "last_reviewed_on": today,
            "last_score": score,
            "review_count": review_count + 1,
            "ease_factor": new_ease,
            "interval_days": interval,
            "next_due_on": today + timedelta(days=interval),
            "streak": new_streak,
        }
    )
