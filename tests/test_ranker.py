"""Tests for topic ranking and daily quiz plans."""

from datetime import date, timedelta

import pytest

from lecture_quest.models.history import LectureRecord, QuizHistory
from lecture_quest.models.plan import ReviewReason
from lecture_quest.models.review import TopicReviewRecord
from lecture_quest.progression.ranker import (
    build_daily_plan,
    complete_daily_plan,
    rank_due,
    topic_priority,
)

TODAY = date(2026, 3, 10)


def _record(topic: str, due_in: int, **overrides) -> TopicReviewRecord:
    fields = {
        "topic": topic,
        "last_reviewed_on": TODAY - timedelta(days=3),
        "last_score": 80,
        "review_count": 3,
        "ease_factor": 2.5,
        "interval_days": 3,
        "next_due_on": TODAY + timedelta(days=due_in),
        "streak": 2,
    }
    fields.update(overrides)
    return TopicReviewRecord(**fields)


class TestTopicPriority:
    def test_due_today(self):
        assert topic_priority(_record("a", 0), TODAY) == pytest.approx(105.0)

    def test_overdue(self):
        assert topic_priority(_record("a", -2), TODAY) == pytest.approx(145.0)

    def test_not_due_and_strong(self):
        record = _record("a", 5, last_score=100, ease_factor=2.6, streak=5)
        assert topic_priority(record, TODAY) == pytest.approx(0.0)


class TestRankDue:
    def test_overdue_outranks_due(self):
        ledger = [_record("due", 0), _record("overdue", -1)]
        assert [r.topic for r in rank_due(ledger, TODAY)] == ["overdue", "due"]

    def test_excludes_strong_future_topics(self):
        ledger = [_record("later", 5, last_score=100, ease_factor=2.6, streak=5)]
        assert rank_due(ledger, TODAY) == []

    def test_includes_weak_future_topics(self):
        ledger = [_record("weak", 2, last_score=0, ease_factor=1.3, streak=0)]
        assert [r.topic for r in rank_due(ledger, TODAY)] == ["weak"]

    def test_ties_keep_ledger_order(self):
        ledger = [_record(f"t{i}", 0) for i in range(5)]
        assert [r.topic for r in rank_due(ledger, TODAY)] == ["t0", "t1", "t2", "t3", "t4"]

    def test_limit(self):
        ledger = [_record(f"t{i}", -i) for i in range(15)]
        ranked = rank_due(ledger, TODAY, limit=4)
        assert [r.topic for r in ranked] == ["t14", "t13", "t12", "t11"]

    def test_deterministic(self):
        ledger = [_record("a", -1), _record("b", 0, last_score=40), _record("c", 1, last_score=10)]
        assert rank_due(ledger, TODAY) == rank_due(ledger, TODAY)


class TestBuildDailyPlan:
    def test_reasons(self):
        ledger = [
            _record("overdue", -5),
            _record("weak", 0, last_score=50),
            _record("new", 0, review_count=1),
            _record("due", 0),
        ]
        plan = build_daily_plan(ledger, QuizHistory(), TODAY)
        reasons = {t.topic: t.reason for t in plan.topics}
        assert reasons == {
            "overdue": ReviewReason.OVERDUE,
            "weak": ReviewReason.WEAK,
            "new": ReviewReason.NEW,
            "due": ReviewReason.DUE,
        }
        assert plan.topics[0].days_since_review == 3
        assert plan.is_active

    def test_falls_back_to_lecture_history(self):
        history = QuizHistory(
            lectures=[
                LectureRecord(id="l1", title="Trees", studied_on=TODAY, review_score=60,
                              incorrect_topics=["AVL", "Heaps"]),
                LectureRecord(id="l2", title="Graphs", studied_on=TODAY, review_score=30,
                              incorrect_topics=["Heaps", "BFS"]),
            ]
        )
        plan = build_daily_plan([], history, TODAY)
        assert [t.topic for t in plan.topics] == ["Heaps", "BFS", "AVL"]
        assert plan.topics[0].source_lecture_id == "l2"
        assert all(t.reason == ReviewReason.WEAK for t in plan.topics)

    def test_nothing_to_review(self):
        with pytest.raises(ValueError):
            build_daily_plan([], QuizHistory(), TODAY)


class TestCompleteDailyPlan:
    def test_completes_copy(self):
        plan = build_daily_plan([_record("a", 0)], QuizHistory(), TODAY)
        done = complete_daily_plan(plan, 85, TODAY)
        assert done.completed and done.score == 85 and done.completed_on == TODAY
        assert plan.is_active

    def test_cannot_complete_twice(self):
        plan = build_daily_plan([_record("a", 0)], QuizHistory(), TODAY)
        done = complete_daily_plan(plan, 85, TODAY)
        with pytest.raises(ValueError):
            complete_daily_plan(done, 90, TODAY)
