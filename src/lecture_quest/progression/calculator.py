"""XP, level, streak and power-up progression rules."""

import math
from datetime import date

import structlog
from pydantic import BaseModel

from lecture_quest.models.progress import (
    MAX_SECOND_CHANCE,
    UserProgressState,
    level_for_xp,
    level_title,
    xp_for_next_level,
    xp_threshold,
)
from lecture_quest.models.review import TopicReviewRecord

logger = structlog.get_logger()

BASE_XP = 50
XP_PER_CORRECT = 10
PERFECT_BONUS = 50
CONFIDENCE_XP_PER_POINT = 5
IMPROVEMENT_BONUS = 20
STREAK_XP_PER_DAY = 5
MASTERY_SCORE = 80
MASTERY_STREAK = 2
HINT_LEVEL_INTERVAL = 3

POWER_UP_KINDS = ("hints", "second_chance")


class XPAward(BaseModel):
    """Result of adding XP to a learner's total."""

    amount: int
    previous_total: int
    new_total: int
    previous_level: int
    new_level: int

    @property
    def levels_gained(self) -> int:
        return self.new_level - self.previous_level

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.previous_level


def streak_multiplier(current_streak: int) -> float:
    if current_streak >= 30:
        return 2.0
    if current_streak >= 7:
        return 1.5
    return 1.0


def calculate_quiz_xp(
    correct_count: int,
    total_questions: int,
    is_perfect: bool | None = None,
    confidence_rating: int = 0,
    is_improvement: bool = False,
    current_streak: int = 0,
    double_xp_active: bool = False,
) -> int:
    """Calculate the XP earned for completing a quiz.

    The additive total is scaled by the streak multiplier first and by the
    double-XP power-up second, then floored.

    Args:
        correct_count: Questions answered correctly.
        total_questions: Questions in the quiz.
        is_perfect: Every answer correct; derived from the counts when None.
        confidence_rating: Self-rated confidence 0-5.
        is_improvement: Accuracy beat the previous attempt on the same material.
        current_streak: Consecutive study days.
        double_xp_active: Whether the double-XP power-up is armed.

    Returns:
        Whole XP points.
    """
    correct_count = max(0, correct_count)
    if is_perfect is None:
        is_perfect = total_questions > 0 and correct_count == total_questions
    confidence_rating = max(0, min(5, confidence_rating))
    current_streak = max(0, current_streak)

    xp: float = BASE_XP
    xp += correct_count * XP_PER_CORRECT
    if is_perfect:
        xp += PERFECT_BONUS
    xp += confidence_rating * CONFIDENCE_XP_PER_POINT
    if is_improvement:
        xp += IMPROVEMENT_BONUS
    xp += current_streak * STREAK_XP_PER_DAY

    xp *= streak_multiplier(current_streak)
    if double_xp_active:
        xp *= 2
    return math.floor(xp)


def confidence_xp(rating: int) -> int:
    """XP granted when a confidence rating is submitted."""
    return max(0, min(5, rating)) * CONFIDENCE_XP_PER_POINT


def xp_progress(total_xp: int) -> dict[str, int | str]:
    """Describe where ``total_xp`` sits inside its level.

    Returns:
        Dict with level, title, XP earned within the level and XP still
        needed for the next one.
    """
    total_xp = max(0, total_xp)
    level = level_for_xp(total_xp)
    return {
        "level": level,
        "title": level_title(level),
        "xp_in_level": max(0, total_xp - xp_threshold(level)),
        "xp_to_next_level": xp_for_next_level(level) - total_xp,
        "next_level_at": xp_for_next_level(level),
    }


def award_xp(profile: UserProgressState, amount: int) -> tuple[UserProgressState, XPAward]:
    """Add ``amount`` XP (negative amounts count as zero)."""
    amount = max(0, int(amount))
    previous_total = profile.total_xp
    new_total = previous_total + amount
    award = XPAward(
        amount=amount,
        previous_total=previous_total,
        new_total=new_total,
        previous_level=level_for_xp(previous_total),
        new_level=level_for_xp(new_total),
    )
    return profile.model_copy(update={"total_xp": new_total}), award


def level_up_rewards(previous_level: int, new_level: int) -> list[str]:
    """Rewards for every level crossed between the two levels."""
    rewards = []
    for level in range(previous_level + 1, new_level + 1):
        if level % HINT_LEVEL_INTERVAL == 0:
            rewards.append("hint")
    return rewards


def apply_level_up_rewards(
    profile: UserProgressState, award: XPAward
) -> tuple[UserProgressState, list[str]]:
    rewards = level_up_rewards(award.previous_level, award.new_level)
    if not rewards:
        return profile, rewards
    power_ups = profile.power_ups.model_copy(
        update={"hints": profile.power_ups.hints + rewards.count("hint")}
    )
    logger.info("level_up_rewards_granted", new_level=award.new_level, rewards=rewards)
    return profile.model_copy(update={"power_ups": power_ups}), rewards


def apply_quiz_power_ups(profile: UserProgressState, is_perfect: bool) -> UserProgressState:
    """Consume an armed double-XP and grant a second chance for a perfect quiz."""
    power_ups = profile.power_ups.model_copy()
    power_ups.double_xp = False
    if is_perfect and power_ups.second_chance < MAX_SECOND_CHANCE:
        power_ups.second_chance += 1
    return profile.model_copy(update={"power_ups": power_ups})


def use_power_up(profile: UserProgressState, kind: str) -> UserProgressState:
    """Spend one charge of a consumable power-up (never below zero)."""
    if kind not in POWER_UP_KINDS:
        raise ValueError(f"Unknown power-up: {kind}")
    power_ups = profile.power_ups.model_copy()
    setattr(power_ups, kind, max(0, getattr(power_ups, kind) - 1))
    return profile.model_copy(update={"power_ups": power_ups})


def update_study_streak(profile: UserProgressState, today: date) -> UserProgressState:
    """Extend, keep or restart the consecutive study-day streak."""
    last = profile.last_activity_on
    if last is None:
        current = 1
    else:
        gap = (today - last).days
        if gap <= 0:
            current = max(1, profile.current_streak)
        elif gap == 1:
            current = profile.current_streak + 1
        else:
            current = 1
    return profile.model_copy(
        update={
            "current_streak": current,
            "longest_streak": max(profile.longest_streak, current),
            "last_activity_on": max(today, last) if last else today,
        }
    )


def update_quiz_stats(
    profile: UserProgressState,
    *,
    is_perfect: bool,
    is_improvement: bool,
    is_daily: bool,
    today: date,
) -> UserProgressState:
    """Advance the running quiz counters after a completed quiz."""
    stats = profile.stats.model_copy()
    stats.quizzes_completed += 1
    if is_perfect:
        stats.perfect_scores += 1
        stats.perfect_streak += 1
    else:
        stats.perfect_streak = 0
    stats.consecutive_improvements = stats.consecutive_improvements + 1 if is_improvement else 0
    if is_daily:
        stats.daily_quizzes_completed += 1
        last = stats.last_daily_quiz_on
        if last is not None and (today - last).days == 0:
            stats.daily_quiz_streak = max(1, stats.daily_quiz_streak)
        elif last is not None and (today - last).days == 1:
            stats.daily_quiz_streak += 1
        else:
            stats.daily_quiz_streak = 1
        stats.daily_perfect_streak = stats.daily_perfect_streak + 1 if is_perfect else 0
        stats.last_daily_quiz_on = today
    return profile.model_copy(update={"stats": stats})


def update_topic_sets(
    profile: UserProgressState,
    ledger: list[TopicReviewRecord],
    incorrect_topics: list[str],
) -> UserProgressState:
    """Recompute mastered and needs-practice topics after a quiz.

    A topic is mastered once its latest score is at least 80 on a streak of
    two or more passing reviews. Mastered and needs-practice never overlap.
    """
    missed = list(dict.fromkeys(incorrect_topics))
    mastered = [t for t in profile.mastered_topics if t not in missed]
    for record in ledger:
        if (
            record.topic not in missed
            and record.topic not in mastered
            and record.last_score >= MASTERY_SCORE
            and record.streak >= MASTERY_STREAK
        ):
            mastered.append(record.topic)
    needs_practice = list(profile.needs_practice)
    for topic in missed:
        if topic not in needs_practice:
            needs_practice.append(topic)
    mastered_set = set(mastered)
    needs_practice = [t for t in needs_practice if t not in mastered_set]
    return profile.model_copy(
        update={"mastered_topics": mastered, "needs_practice": needs_practice}
    )
