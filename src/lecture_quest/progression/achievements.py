"""Achievement unlock evaluation.

Each achievement id maps to an ``AchievementRule``: a predicate deciding
whether it unlocks and a progress function feeding its progress bar. Rules
read a normalised ``EvaluationContext`` built once per evaluation from the
learner's profile, review ledger, lecture history and session facts.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

import structlog
from pydantic import BaseModel, ConfigDict

from lecture_quest.models.achievement import Achievement
from lecture_quest.models.context import SessionContext
from lecture_quest.models.history import QuizHistory
from lecture_quest.models.progress import UserProgressState
from lecture_quest.models.review import TopicReviewRecord

logger = structlog.get_logger()

STRONG_LECTURE_SCORE = 80
LOW_SCORE = 50
TOP_CONFIDENCE = 5


class EvaluationContext(BaseModel):
    """Every signal the achievement rules read, resolved to plain values."""

    model_config = ConfigDict(frozen=True)

    today: date

    # Cumulative counts
    lectures_uploaded: int = 0
    quizzes_completed: int = 0
    total_xp: int = 0
    level: int = 1

    # Perfect scores
    perfect_scores: int = 0
    perfect_streak: int = 0
    perfect_on_first: bool = False

    # Study-day streaks
    current_streak: int = 0
    longest_streak: int = 0

    # Calendar and clock
    current_hour: int | None = None
    day_of_week: int | None = None
    day_of_month: int | None = None
    morning_streak: int = 0

    # Improvement patterns
    best_improvement: int = 0
    bounce_back: bool = False
    perfect_turnaround: bool = False
    consecutive_improvements: int = 0
    daily_reviews: int = 0
    most_reviews_of_one_lecture: int = 0

    # Topic mastery
    mastered_topics: int = 0
    strong_lectures: int = 0
    specialist: bool = False
    ledger_reviews: int = 0
    longest_interval: int = 0

    # Social
    friends_count: int = 0
    leaderboard_rank: int | None = None
    friend_challenges_won: int = 0
    study_buddy_sessions: int = 0
    invites_accepted: int = 0

    # Daily quiz
    daily_quizzes_completed: int = 0
    daily_quiz_streak: int = 0
    daily_perfect: bool = False
    daily_perfect_streak: int = 0

    # Special
    top_confidence_ratings: int = 0
    power_up_kinds_used: int = 0
    calendar_connected: bool = False
    batch_upload_count: int = 0

    @classmethod
    def build(
        cls,
        profile: UserProgressState,
        ledger: list[TopicReviewRecord],
        history: QuizHistory,
        session: SessionContext,
    ) -> "EvaluationContext":
        """Resolve signals: session values first, then stored stats, then history."""
        lectures = history.lectures
        stats = profile.stats

        def pick(value: int | None, fallback: int) -> int:
            return fallback if value is None else value

        derived_perfects = sum(1 for lecture in lectures if lecture.review_score == 100) + sum(
            1 for lecture in lectures for attempt in lecture.daily_quizzes if attempt.score == 100
        )
        bounce_back = False
        perfect_turnaround = False
        for lecture in lectures:
            attempts = lecture.chronological_quizzes
            for previous, current in zip(attempts, attempts[1:]):
                if previous.score < LOW_SCORE and current.score >= STRONG_LECTURE_SCORE:
                    bounce_back = True
                if previous.score < LOW_SCORE and current.score == 100:
                    perfect_turnaround = True
        deltas = [delta for lecture in lectures for delta in lecture.score_deltas()]

        return cls(
            today=session.today,
            lectures_uploaded=len(lectures),
            quizzes_completed=pick(
                session.total_quizzes_completed,
                max(stats.quizzes_completed, len(lectures)),
            ),
            total_xp=profile.total_xp,
            level=profile.level,
            perfect_scores=pick(
                session.perfect_scores, max(stats.perfect_scores, derived_perfects)
            ),
            perfect_streak=pick(session.perfect_streak, stats.perfect_streak),
            perfect_on_first=any(
                lecture.review_score == 100 and not lecture.daily_quizzes
                for lecture in lectures
            ),
            current_streak=profile.current_streak,
            longest_streak=profile.longest_streak,
            current_hour=session.current_hour,
            day_of_week=session.day_of_week,
            day_of_month=session.day_of_month,
            morning_streak=session.morning_streak,
            best_improvement=max(deltas, default=0),
            bounce_back=bounce_back,
            perfect_turnaround=perfect_turnaround,
            consecutive_improvements=pick(
                session.consecutive_improvements, stats.consecutive_improvements
            ),
            daily_reviews=history.daily_attempt_count,
            most_reviews_of_one_lecture=max(
                (len(lecture.daily_quizzes) for lecture in lectures), default=0
            ),
            mastered_topics=len(profile.mastered_topics),
            strong_lectures=len(
                {lecture.id for lecture in lectures if lecture.review_score >= STRONG_LECTURE_SCORE}
            ),
            specialist=any(
                lecture.review_score >= STRONG_LECTURE_SCORE and len(lecture.daily_quizzes) >= 2
                for lecture in lectures
            ),
            ledger_reviews=sum(record.review_count for record in ledger),
            longest_interval=max((record.interval_days for record in ledger), default=0),
            friends_count=session.friends_count,
            leaderboard_rank=session.leaderboard_rank,
            friend_challenges_won=session.friend_challenges_won,
            study_buddy_sessions=session.study_buddy_sessions,
            invites_accepted=session.invites_accepted,
            daily_quizzes_completed=pick(
                session.daily_quizzes_completed,
                max(stats.daily_quizzes_completed, history.daily_attempt_count),
            ),
            daily_quiz_streak=pick(session.daily_quiz_streak, stats.daily_quiz_streak),
            daily_perfect=any(
                attempt.score == 100 for lecture in lectures for attempt in lecture.daily_quizzes
            ),
            daily_perfect_streak=pick(
                session.daily_perfect_streak, stats.daily_perfect_streak
            ),
            top_confidence_ratings=sum(
                1 for lecture in lectures if lecture.confidence_rating == TOP_CONFIDENCE
            ),
            power_up_kinds_used=session.power_ups_used.kinds_used,
            calendar_connected=session.calendar_connected,
            batch_upload_count=session.batch_upload_count,
        )


@dataclass(frozen=True)
class AchievementRule:
    predicate: Callable[[EvaluationContext], bool]
    progress: Callable[[EvaluationContext], int]


def at_least(signal: str, threshold: int) -> AchievementRule:
    """Unlock once a numeric signal reaches ``threshold``; progress tracks it."""

    def value(ctx: EvaluationContext) -> int:
        return int(getattr(ctx, signal))

    return AchievementRule(lambda ctx: value(ctx) >= threshold, value)


def when(check: Callable[[EvaluationContext], bool]) -> AchievementRule:
    """Unlock when ``check`` holds; progress is 1 or 0."""
    return AchievementRule(check, lambda ctx: 1 if check(ctx) else 0)


def _hour_in(start: int, end: int) -> Callable[[EvaluationContext], bool]:
    return lambda ctx: ctx.current_hour is not None and start <= ctx.current_hour < end


def _weekday_in(*days: int) -> Callable[[EvaluationContext], bool]:
    return lambda ctx: ctx.day_of_week is not None and ctx.day_of_week in days


def _rank_within(best: int) -> Callable[[EvaluationContext], bool]:
    return lambda ctx: ctx.leaderboard_rank is not None and ctx.leaderboard_rank <= best


def _streak_comeback(ctx: EvaluationContext) -> bool:
    return ctx.longest_streak >= 7 and 1 <= ctx.current_streak < ctx.longest_streak


RULES: dict[str, AchievementRule] = {
    # Study milestones
    "first_steps": at_least("lectures_uploaded", 1),
    "first_lecture": at_least("lectures_uploaded", 1),
    "five_lectures": at_least("lectures_uploaded", 5),
    "dedicated_student": at_least("lectures_uploaded", 5),
    "ten_lectures": at_least("lectures_uploaded", 10),
    "knowledge_seeker": at_least("lectures_uploaded", 10),
    "twenty_five_lectures": at_least("lectures_uploaded", 25),
    "fifty_lectures": at_least("lectures_uploaded", 50),
    "hundred_lectures": at_least("lectures_uploaded", 100),
    "first_quiz": at_least("quizzes_completed", 1),
    "ten_quizzes": at_least("quizzes_completed", 10),
    "fifty_quizzes": at_least("quizzes_completed", 50),
    "hundred_quizzes": at_least("quizzes_completed", 100),
    "xp_1000": at_least("total_xp", 1000),
    "xp_5000": at_least("total_xp", 5000),
    "xp_10000": at_least("total_xp", 10000),
    "xp_25000": at_least("total_xp", 25000),
    "xp_50000": at_least("total_xp", 50000),
    # Perfect scores
    "quick_learner": at_least("perfect_scores", 1),
    "first_perfect": at_least("perfect_scores", 1),
    "five_perfects": at_least("perfect_scores", 5),
    "ten_perfects": at_least("perfect_scores", 10),
    "perfectionist": at_least("perfect_scores", 10),
    "twenty_perfects": at_least("perfect_scores", 20),
    "thirty_perfects": at_least("perfect_scores", 30),
    "fifty_perfects": at_least("perfect_scores", 50),
    "seventy_five_perfects": at_least("perfect_scores", 75),
    "hundred_perfects": at_least("perfect_scores", 100),
    "perfect_streak_3": at_least("perfect_streak", 3),
    "perfect_streak_5": at_least("perfect_streak", 5),
    "perfect_streak_10": at_least("perfect_streak", 10),
    "perfect_on_first": when(lambda ctx: ctx.perfect_on_first),
    # Study-day streaks
    **{
        f"streak_{days}": at_least("current_streak", days)
        for days in (3, 7, 14, 21, 30, 45, 60, 90, 100, 150, 180, 270, 365)
    },
    "week_warrior": at_least("current_streak", 7),
    "streak_comeback": when(_streak_comeback),
    "longest_streak_30": at_least("longest_streak", 30),
    # Time of day and calendar
    "early_bird": when(_hour_in(0, 8)),
    "night_owl": when(_hour_in(22, 24)),
    "lunch_learner": when(_hour_in(12, 13)),
    "late_night": when(_hour_in(0, 3)),
    "afternoon_ace": when(_hour_in(14, 17)),
    "weekend_warrior": when(_weekday_in(5, 6)),
    "monday_motivation": when(_weekday_in(0)),
    "friday_focus": when(_weekday_in(4)),
    "first_of_month": when(lambda ctx: ctx.day_of_month == 1),
    "morning_routine": at_least("morning_streak", 5),
    # Improvement
    "comeback_kid": when(lambda ctx: ctx.best_improvement >= 20),
    "improvement_15": when(lambda ctx: ctx.best_improvement >= 15),
    "improvement_30": when(lambda ctx: ctx.best_improvement >= 30),
    "improvement_50": when(lambda ctx: ctx.best_improvement >= 50),
    "improvement_75": when(lambda ctx: ctx.best_improvement >= 75),
    "perfect_turnaround": when(lambda ctx: ctx.perfect_turnaround),
    "bouncing_back": when(lambda ctx: ctx.bounce_back),
    "consistent_improver": at_least("consecutive_improvements", 5),
    "growth_mindset": at_least("daily_reviews", 10),
    "mastery_journey": at_least("most_reviews_of_one_lecture", 5),
    # Topic mastery
    "first_mastery": at_least("mastered_topics", 1),
    "three_topics": at_least("mastered_topics", 3),
    "topic_master": at_least("mastered_topics", 3),
    "five_topics": at_least("mastered_topics", 5),
    "ten_topics": at_least("mastered_topics", 10),
    "fifteen_topics": at_least("mastered_topics", 15),
    "twenty_topics": at_least("mastered_topics", 20),
    "twenty_five_topics": at_least("mastered_topics", 25),
    "thirty_topics": at_least("mastered_topics", 30),
    "fifty_topics": at_least("mastered_topics", 50),
    "jack_of_trades": at_least("strong_lectures", 5),
    "specialist": when(lambda ctx: ctx.specialist),
    "renaissance_learner": at_least("strong_lectures", 3),
    "recall_regular": at_least("ledger_reviews", 50),
    "long_term_memory": when(lambda ctx: ctx.longest_interval >= 30),
    # Social and competition
    "first_friend": at_least("friends_count", 1),
    "five_friends": at_least("friends_count", 5),
    "ten_friends": at_least("friends_count", 10),
    "twenty_five_friends": at_least("friends_count", 25),
    "leaderboard_top10": when(_rank_within(10)),
    "leaderboard_top3": when(_rank_within(3)),
    "leaderboard_champion": when(_rank_within(1)),
    "friendly_competition": at_least("friend_challenges_won", 1),
    "study_buddy": at_least("study_buddy_sessions", 1),
    "invite_accepted": at_least("invites_accepted", 1),
    # Daily quiz
    "daily_first": at_least("daily_quizzes_completed", 1),
    "daily_10": at_least("daily_quizzes_completed", 10),
    "daily_25": at_least("daily_quizzes_completed", 25),
    "daily_50": at_least("daily_quizzes_completed", 50),
    "daily_100": at_least("daily_quizzes_completed", 100),
    "daily_200": at_least("daily_quizzes_completed", 200),
    "week_of_dailies": at_least("daily_quiz_streak", 7),
    "month_of_dailies": at_least("daily_quiz_streak", 30),
    "daily_perfect": when(lambda ctx: ctx.daily_perfect),
    "daily_streak_perfect": at_least("daily_perfect_streak", 7),
    # Special
    "confident_scholar": when(lambda ctx: ctx.top_confidence_ratings >= 1),
    "confidence_master": at_least("top_confidence_ratings", 10),
    "power_up_pro": at_least("power_up_kinds_used", 3),
    "calendar_connected": when(lambda ctx: ctx.calendar_connected),
    "batch_upload": when(lambda ctx: ctx.batch_upload_count >= 5),
    "level_10": at_least("level", 10),
    "level_15": at_least("level", 15),
}


class EvaluationResult(BaseModel):
    """Outcome of one evaluation pass."""

    achievements: list[Achievement]
    newly_unlocked: list[Achievement]

    @property
    def xp_reward(self) -> int:
        return sum(achievement.xp_reward for achievement in self.newly_unlocked)


def evaluate(
    profile: UserProgressState,
    ledger: list[TopicReviewRecord],
    history: QuizHistory,
    session: SessionContext | None = None,
) -> EvaluationResult:
    """Evaluate every locked achievement against the learner's current state.

    Returns updated copies of ``profile.achievements`` (same order) and the
    ones unlocked by this pass. Unlocked achievements are left untouched, so
    repeating a call with unchanged inputs unlocks nothing. Unknown ids and
    rules that fail are skipped; this function does not raise.
    """
    session = session or SessionContext()
    try:
        ctx = EvaluationContext.build(profile, ledger, history, session)
    except Exception as e:
        logger.warning("achievement_context_failed", error=str(e))
        return EvaluationResult(achievements=list(profile.achievements), newly_unlocked=[])

    updated: list[Achievement] = []
    newly_unlocked: list[Achievement] = []
    for achievement in profile.achievements:
        if achievement.unlocked:
            updated.append(achievement)
            continue
        rule = RULES.get(achievement.id)
        if rule is None:
            updated.append(achievement)
            continue
        try:
            progress = rule.progress(ctx)
            satisfied = rule.predicate(ctx)
        except Exception as e:
            logger.warning("achievement_rule_failed", achievement_id=achievement.id, error=str(e))
            updated.append(achievement)
            continue

        changes: dict = {"progress": max(0, min(achievement.max_progress, progress))}
        if satisfied:
            changes["unlocked"] = True
            changes["unlocked_on"] = ctx.today
        state = achievement.model_copy(update=changes)
        updated.append(state)
        if satisfied:
            newly_unlocked.append(state)
            logger.info("achievement_unlocked", achievement_id=state.id)

    return EvaluationResult(achievements=updated, newly_unlocked=newly_unlocked)
