"""Tests for the spaced-repetition scheduler."""

from datetime import date, timedelta

import pytest

from lecture_quest.models.review import TopicReviewRecord
from lecture_quest.progression.scheduler import (
    next_ease_factor,
    next_interval,
    schedule,
    score_to_quality,
)

TODAY = date(2026, 3, 2)


def _record(**overrides) -> TopicReviewRecord:
    fields = {
        "topic": "Recursion",
        "last_reviewed_on": TODAY - timedelta(days=7),
        "last_score": 85,
        "review_count": 4,
        "ease_factor": 2.5,
        "interval_days": 7,
        "next_due_on": TODAY,
        "streak": 3,
    }
    fields.update(overrides)
    return TopicReviewRecord(**fields)


class TestScoreToQuality:
    def test_rounds_half_up(self):
        assert score_to_quality(90) == 5
        assert score_to_quality(50) == 3
        assert score_to_quality(70) == 4

    def test_bounds(self):
        assert score_to_quality(0) == 0
        assert score_to_quality(100) == 5

    def test_out_of_range_scores_are_clamped(self):
        assert score_to_quality(-20) == 0
        assert score_to_quality(140) == 5


class TestFirstReview:
    def test_first_review_scored_90(self):
        record = schedule(None, 90, TODAY, topic="Recursion", lecture_id="lec-1")
        assert record.ease_factor == pytest.approx(2.6)
        assert record.streak == 1
        assert record.interval_days == 3
        assert record.next_due_on == TODAY + timedelta(days=3)
        assert record.review_count == 1
        assert record.source_lecture_id == "lec-1"

    def test_first_review_failed(self):
        record = schedule(None, 30, TODAY, topic="Pointers")
        assert record.streak == 0
        assert record.interval_days == 1
        assert record.next_due_on == TODAY + timedelta(days=1)

    def test_topic_required_for_new_record(self):
        with pytest.raises(ValueError):
            schedule(None, 80, TODAY)


class TestExistingRecord:
    def test_failure_resets_streak_and_interval(self):
        record = schedule(_record(ease_factor=2.5, interval_days=7, streak=3), 40, TODAY)
        assert record.streak == 0
        assert record.interval_days == 1
        assert record.ease_factor == pytest.approx(2.18)

    def test_does_not_mutate_existing(self):
        existing = _record()
        schedule(existing, 100, TODAY)
        assert existing.streak == 3
        assert existing.review_count == 4
        assert existing.interval_days == 7

    def test_success_climbs_ladder(self):
        record = schedule(_record(streak=3), 100, TODAY)
        # streak 4 -> ladder 30 days scaled by the new ease 2.6
        assert record.streak == 4
        assert record.interval_days == 78
        assert record.review_count == 5
        assert record.last_reviewed_on == TODAY

    def test_ease_factor_floor(self):
        record = schedule(_record(ease_factor=1.3), 0, TODAY)
        assert record.ease_factor == pytest.approx(1.3)

    def test_passing_score_below_quality_three_boundary(self):
        # 59 rounds to quality 3 but still breaks the streak
        record = schedule(_record(streak=5), 59, TODAY)
        assert record.streak == 0
        assert record.interval_days == 1


class TestProperties:
    @pytest.mark.parametrize("score", [0, 10, 25, 40, 55, 59])
    def test_failing_scores_always_reset(self, score):
        for streak in (0, 1, 4, 9):
            record = schedule(_record(streak=streak), score, TODAY)
            assert record.interval_days == 1
            assert record.streak == 0

    def test_ease_non_decreasing_in_score(self):
        eases = [schedule(_record(), s, TODAY).ease_factor for s in range(60, 101)]
        assert eases == sorted(eases)

    def test_ease_strictly_increasing_in_quality(self):
        assert next_ease_factor(2.5, 3) < next_ease_factor(2.5, 4) < next_ease_factor(2.5, 5)

    def test_interval_non_decreasing_in_streak(self):
        intervals = [next_interval(5, streak, 2.5) for streak in range(1, 12)]
        assert intervals == sorted(intervals)
        assert intervals[0] == 3
