"""Tests for the achievement catalog and evaluator."""

from datetime import UTC, date, datetime, timedelta

from lecture_quest.models.achievement import Achievement
from lecture_quest.models.context import PowerUpUsage, SessionContext
from lecture_quest.models.history import DailyQuizAttempt, LectureRecord, QuizHistory
from lecture_quest.models.progress import UserProgressState
from lecture_quest.models.review import TopicReviewRecord
from lecture_quest.progression import achievements
from lecture_quest.progression.achievements import AchievementRule, EvaluationContext, evaluate
from lecture_quest.progression.catalog import (
    ACHIEVEMENT_DEFINITIONS,
    DEFINITIONS_BY_ID,
    initial_achievements,
)

TODAY = date(2026, 3, 10)


def _profile(**fields) -> UserProgressState:
    return UserProgressState(achievements=initial_achievements(), **fields)


def _unlocked_ids(result) -> set[str]:
    return {a.id for a in result.newly_unlocked}


def _state(result, achievement_id: str) -> Achievement:
    return next(a for a in result.achievements if a.id == achievement_id)


class TestCatalog:
    def test_ids_unique(self):
        ids = [d.id for d in ACHIEVEMENT_DEFINITIONS]
        assert len(ids) == len(set(ids))

    def test_every_definition_has_a_rule(self):
        assert set(DEFINITIONS_BY_ID) == set(achievements.RULES)

    def test_initial_achievements_locked(self):
        items = initial_achievements()
        assert len(items) == len(ACHIEVEMENT_DEFINITIONS)
        assert not any(a.unlocked or a.progress for a in items)


class TestStreakAchievement:
    def test_streak_7_unlocks_once(self):
        session = SessionContext(today=TODAY)
        profile = _profile(current_streak=7)
        first = evaluate(profile, [], QuizHistory(), session)
        assert "streak_7" in _unlocked_ids(first)
        assert _state(first, "streak_7").progress == 7
        assert _state(first, "streak_7").unlocked_on == TODAY

        later = profile.model_copy(
            update={"current_streak": 10, "longest_streak": 10, "achievements": first.achievements}
        )
        second = evaluate(later, [], QuizHistory(), SessionContext(today=TODAY + timedelta(days=3)))
        assert "streak_7" not in _unlocked_ids(second)
        assert _state(second, "streak_7").progress == 7
        assert _state(second, "streak_7").unlocked_on == TODAY

    def test_progress_clamped_to_max(self):
        result = evaluate(_profile(current_streak=500), [], QuizHistory(), SessionContext(today=TODAY))
        assert _state(result, "streak_3").progress == 3
        assert _state(result, "streak_365").progress == 365

    def test_partial_progress_without_unlock(self):
        result = evaluate(_profile(current_streak=4), [], QuizHistory(), SessionContext(today=TODAY))
        streak_7 = _state(result, "streak_7")
        assert not streak_7.unlocked
        assert streak_7.progress == 4
        assert streak_7.progress_percent == 57.1


class TestEvaluate:
    def test_idempotent(self):
        history = QuizHistory(
            lectures=[LectureRecord(id="l1", studied_on=TODAY, review_score=100)]
        )
        profile = _profile(total_xp=1200, current_streak=3)
        first = evaluate(profile, [], history, SessionContext(today=TODAY))
        assert first.newly_unlocked
        assert first.xp_reward == sum(a.xp_reward for a in first.newly_unlocked)
        again = profile.model_copy(update={"achievements": first.achievements})
        second = evaluate(again, [], history, SessionContext(today=TODAY))
        assert second.newly_unlocked == []
        assert second.xp_reward == 0

    def test_unknown_id_is_ignored(self):
        profile = UserProgressState(achievements=[Achievement(id="moon_landing")])
        result = evaluate(profile, [], QuizHistory(), SessionContext(today=TODAY))
        assert result.newly_unlocked == []
        assert result.achievements == profile.achievements

    def test_missing_clock_means_not_met(self):
        result = evaluate(_profile(), [], QuizHistory(), SessionContext(today=TODAY))
        assert not _unlocked_ids(result) & {"early_bird", "night_owl", "weekend_warrior",
                                            "first_of_month", "leaderboard_top10"}

    def test_calendar_rules(self):
        # Sunday 1 March 2026, 06:15
        session = SessionContext.at(datetime(2026, 3, 1, 6, 15))
        unlocked = _unlocked_ids(evaluate(_profile(), [], QuizHistory(), session))
        assert {"early_bird", "weekend_warrior", "first_of_month"} <= unlocked
        assert "night_owl" not in unlocked
        assert "monday_motivation" not in unlocked

    def test_failing_rule_is_skipped(self, monkeypatch):
        def boom(ctx):
            raise RuntimeError("broken rule")

        monkeypatch.setitem(achievements.RULES, "first_quiz", AchievementRule(boom, boom))
        profile = _profile()
        profile.stats.quizzes_completed = 1
        result = evaluate(profile, [], QuizHistory(), SessionContext(today=TODAY))
        assert "first_quiz" not in _unlocked_ids(result)
        assert "ten_quizzes" not in _unlocked_ids(result)

    def test_context_failure_keeps_achievements(self, monkeypatch):
        def boom(*args):
            raise RuntimeError("bad history")

        monkeypatch.setattr(EvaluationContext, "build", boom)
        profile = _profile(current_streak=7)
        result = evaluate(profile, [], QuizHistory(), SessionContext(today=TODAY))
        assert result.newly_unlocked == []
        assert result.achievements == profile.achievements

    def test_does_not_mutate_profile(self):
        profile = _profile(current_streak=7)
        evaluate(profile, [], QuizHistory(), SessionContext(today=TODAY))
        assert not profile.achievement("streak_7").unlocked

    def test_social_and_special_signals(self):
        session = SessionContext(
            today=TODAY,
            friends_count=5,
            leaderboard_rank=3,
            calendar_connected=True,
            power_ups_used=PowerUpUsage(second_chance=True, hints=True, double_xp=True),
        )
        unlocked = _unlocked_ids(evaluate(_profile(), [], QuizHistory(), session))
        assert {"first_friend", "five_friends", "leaderboard_top10", "leaderboard_top3",
                "calendar_connected", "power_up_pro"} <= unlocked
        assert "leaderboard_champion" not in unlocked


class TestHistorySignals:
    def test_improvement_uses_chronological_order(self):
        # Stored newest first; sorted by time the scores read 40 -> 30 -> 85.
        lecture = LectureRecord(
            id="l1",
            studied_on=TODAY,
            review_score=40,
            daily_quizzes=[
                DailyQuizAttempt(taken_at=datetime(2026, 3, 5, 9), score=85),
                DailyQuizAttempt(taken_at=datetime(2026, 3, 3, 9), score=30),
            ],
        )
        history = QuizHistory(lectures=[lecture])
        ctx = EvaluationContext.build(_profile(), [], history, SessionContext(today=TODAY))
        assert ctx.best_improvement == 55
        assert ctx.bounce_back
        assert not ctx.perfect_turnaround
        unlocked = _unlocked_ids(evaluate(_profile(), [], history, SessionContext(today=TODAY)))
        assert {"bouncing_back", "comeback_kid", "improvement_50"} <= unlocked
        assert "improvement_75" not in unlocked

    def test_mixed_timezone_attempts(self):
        lecture = LectureRecord(
            id="l1",
            studied_on=TODAY,
            review_score=60,
            daily_quizzes=[
                DailyQuizAttempt(taken_at=datetime(2026, 3, 6, 9), score=100),
                DailyQuizAttempt(taken_at=datetime(2026, 3, 5, 9, tzinfo=UTC), score=30),
            ],
        )
        history = QuizHistory(lectures=[lecture])
        assert [a.score for a in lecture.chronological_quizzes] == [30, 100]
        result = evaluate(_profile(), [], history, SessionContext(today=TODAY))
        assert {"perfect_turnaround", "bouncing_back"} <= _unlocked_ids(result)

    def test_history_fallback_counts(self):
        history = QuizHistory(
            lectures=[
                LectureRecord(id="l1", studied_on=TODAY, review_score=100, confidence_rating=5),
                LectureRecord(
                    id="l2",
                    studied_on=TODAY,
                    review_score=70,
                    daily_quizzes=[DailyQuizAttempt(taken_at=datetime(2026, 3, 9), score=100)],
                ),
            ]
        )
        ctx = EvaluationContext.build(_profile(), [], history, SessionContext(today=TODAY))
        assert ctx.lectures_uploaded == 2
        assert ctx.perfect_scores == 2
        assert ctx.quizzes_completed == 2
        assert ctx.daily_quizzes_completed == 1
        assert ctx.perfect_on_first
        assert ctx.daily_perfect
        assert ctx.top_confidence_ratings == 1

    def test_session_counters_override(self):
        session = SessionContext(today=TODAY, perfect_scores=12, daily_quiz_streak=7)
        ctx = EvaluationContext.build(_profile(), [], QuizHistory(), session)
        assert ctx.perfect_scores == 12
        assert ctx.daily_quiz_streak == 7

    def test_ledger_signals(self):
        ledger = [
            TopicReviewRecord(
                topic=f"t{i}", last_reviewed_on=TODAY, last_score=95, review_count=10,
                interval_days=30 if i == 0 else 7, next_due_on=TODAY + timedelta(days=7),
                streak=4,
            )
            for i in range(5)
        ]
        unlocked = _unlocked_ids(evaluate(_profile(), ledger, QuizHistory(), SessionContext(today=TODAY)))
        assert {"recall_regular", "long_term_memory"} <= unlocked
