"""
SM-2 调度算法测试
"""
from datetime import date, datetime

import pytest

from radcase.core.sm2 import SM2Scheduler, SM2State


NOW = datetime(2024, 3, 10, 15, 30, 0)


class TestFirstAttempt:
    """首次答题（没有调度状态）"""

    def test_first_pass_schedules_tomorrow(self):
        result = SM2Scheduler.calculate_next_review(None, True, NOW)

        assert result.repetitions == 1
        assert result.interval_days == 1
        assert result.ease_factor == pytest.approx(2.5)
        assert result.next_review == date(2024, 3, 11)
        assert result.last_reviewed == NOW

    def test_first_fail_starts_from_defaults(self):
        result = SM2Scheduler.calculate_next_review(None, False, NOW)

        assert result.repetitions == 0
        assert result.interval_days == 1
        # 2.5 + (0.1 - 4 * (0.08 + 4 * 0.02))
        assert result.ease_factor == pytest.approx(1.96)


class TestPassingIntervals:
    """连续答对的间隔增长"""

    def test_second_pass_is_six_days_regardless_of_ease(self):
        for ease in (1.3, 2.0, 2.5, 3.1):
            state = SM2Scheduler.apply_grade(SM2State(ease, 1, 1), SM2Scheduler.GRADE_CORRECT)
            assert state.interval_days == 6
            assert state.repetitions == 2

    def test_third_pass_multiplies_by_ease(self):
        result = SM2Scheduler.calculate_next_review(SM2State(2.5, 6, 2), True, NOW)

        assert result.repetitions == 3
        assert result.interval_days == 15
        # 答对（4 分）时难度系数不变
        assert result.ease_factor == pytest.approx(2.5)
        assert result.next_review == date(2024, 3, 25)

    def test_interval_rounds_half_up(self):
        state = SM2Scheduler.apply_grade(SM2State(2.5, 5, 2), SM2Scheduler.GRADE_CORRECT)
        assert state.interval_days == 13

    def test_uses_ease_before_update(self):
        # 5 分会提高难度系数，但本次间隔仍按旧系数计算
        state = SM2Scheduler.apply_grade(SM2State(2.0, 10, 3), 5)
        assert state.interval_days == 20
        assert state.ease_factor == pytest.approx(2.1)


class TestFailure:
    """答错重置"""

    @pytest.mark.parametrize("ease,interval,reps", [
        (2.5, 1, 0),
        (2.5, 6, 2),
        (1.3, 15, 3),
        (2.8, 120, 9),
    ])
    def test_fail_resets_repetitions_and_interval(self, ease, interval, reps):
        result = SM2Scheduler.calculate_next_review(SM2State(ease, interval, reps), False, NOW)

        assert result.repetitions == 0
        assert result.interval_days == 1
        assert result.next_review == date(2024, 3, 11)

    def test_fail_at_floor_stays_clamped(self):
        result = SM2Scheduler.calculate_next_review(SM2State(1.3, 15, 3), False, NOW)

        assert result.repetitions == 0
        assert result.interval_days == 1
        assert result.ease_factor == pytest.approx(1.3)

    def test_repeated_failures_never_drop_below_floor(self):
        state = None
        for _ in range(10):
            state = SM2Scheduler.apply_grade(state, SM2Scheduler.GRADE_INCORRECT)
            assert state.ease_factor >= SM2Scheduler.MIN_EASE
        assert state.ease_factor == pytest.approx(1.3)

    def test_ease_floor_holds_for_every_grade(self):
        for grade in range(0, 6):
            state = SM2Scheduler.apply_grade(SM2State(1.3, 1, 0), grade)
            assert state.ease_factor >= SM2Scheduler.MIN_EASE


class TestSequences:
    """连续调用的组合结果（不是幂等的）"""

    def test_same_outcome_twice_gives_different_states(self):
        first = SM2Scheduler.apply_grade(None, SM2Scheduler.GRADE_CORRECT)
        second = SM2Scheduler.apply_grade(first, SM2Scheduler.GRADE_CORRECT)

        assert first != second
        assert (first.repetitions, first.interval_days) == (1, 1)
        assert (second.repetitions, second.interval_days) == (2, 6)

    def test_pass_pass_pass_fail_pass(self):
        outcomes = [True, True, True, True, False, True]
        expected = [(1, 1), (2, 6), (3, 15), (4, 38), (0, 1), (1, 1)]

        state = None
        for outcome, (reps, interval) in zip(outcomes, expected):
            state = SM2Scheduler.calculate_next_review(state, outcome, NOW).state
            assert (state.repetitions, state.interval_days) == (reps, interval)

        assert state.ease_factor == pytest.approx(1.96)


class TestLabels:
    """复习阶段标签"""

    def test_stage_labels(self):
        assert SM2Scheduler.stage_label(None) == "new"
        assert SM2Scheduler.stage_label(0, 1) == "learning"
        assert SM2Scheduler.stage_label(2, 6) == "learning"
        assert SM2Scheduler.stage_label(3, 15) == "reviewing"
        assert SM2Scheduler.stage_label(3, 21) == "mastered"

    def test_mastered_requires_both_thresholds(self):
        assert SM2Scheduler.is_mastered(3, 21)
        assert not SM2Scheduler.is_mastered(2, 40)
        assert not SM2Scheduler.is_mastered(5, 20)
