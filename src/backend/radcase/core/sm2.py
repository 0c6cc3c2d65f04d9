"""
SM-2 间隔重复算法工具类
"""
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class SM2State:
    """单个 (学员, 病例) 的调度状态"""
    ease_factor: float
    interval_days: int
    repetitions: int


@dataclass(frozen=True)
class ScheduleResult:
    """一次答题后的调度结果"""
    ease_factor: float
    interval_days: int
    repetitions: int
    next_review: date
    last_reviewed: datetime

    @property
    def state(self) -> SM2State:
        return SM2State(self.ease_factor, self.interval_days, self.repetitions)


class SM2Scheduler:
    """SM-2 复习调度器（仅接收答对/答错两种结果）"""

    INITIAL_EASE = 2.5
    MIN_EASE = 1.3
    INITIAL_INTERVAL = 1
    SECOND_INTERVAL = 6

    # 质量评分 0-5，>= 3 视为成功回忆
    MAX_GRADE = 5
    PASS_THRESHOLD = 3
    GRADE_CORRECT = 4
    GRADE_INCORRECT = 1

    # 已掌握：统计口径，不落库
    MASTERED_MIN_REPETITIONS = 3
    MASTERED_MIN_INTERVAL = 21

    @classmethod
    def initial_state(cls) -> SM2State:
        """首次答题前的默认状态"""
        return SM2State(cls.INITIAL_EASE, cls.INITIAL_INTERVAL, 0)

    @classmethod
    def grade_for(cls, is_correct: bool) -> int:
        """答对映射为 4 分，答错映射为 1 分"""
        return cls.GRADE_CORRECT if is_correct else cls.GRADE_INCORRECT

    @classmethod
    def next_ease(cls, ease_factor: float, grade: int) -> float:
        """
        计算新的难度系数

        EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))，下限 1.3
        """
        penalty = cls.MAX_GRADE - grade
        ease = ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02))
        if ease < cls.MIN_EASE:
            ease = cls.MIN_EASE
        return ease

    @classmethod
    def apply_grade(cls, state: Optional[SM2State], grade: int) -> SM2State:
        """
        按质量评分更新调度状态

        Args:
            state: 当前状态，None 表示首次答题
            grade: 质量评分 (0-5)

        Returns:
            SM2State: 新状态
        """
        if state is None:
            state = cls.initial_state()

        ease_factor = state.ease_factor
        interval_days = state.interval_days
        repetitions = state.repetitions

        if grade >= cls.PASS_THRESHOLD:
            if repetitions == 0:
                interval_days = cls.INITIAL_INTERVAL
            elif repetitions == 1:
                interval_days = cls.SECOND_INTERVAL
            else:
                # 使用更新前的难度系数，四舍五入（.5 向上）
                interval_days = int(math.floor(interval_days * ease_factor + 0.5))
            repetitions += 1
        else:
            repetitions = 0
            interval_days = cls.INITIAL_INTERVAL

        ease_factor = cls.next_ease(ease_factor, grade)
        return SM2State(ease_factor, max(interval_days, cls.INITIAL_INTERVAL), repetitions)

    @classmethod
    def calculate_next_review(
        cls,
        state: Optional[SM2State],
        is_correct: bool,
        now: Optional[datetime] = None
    ) -> ScheduleResult:
        """
        计算下次复习时间

        Args:
            state: 当前调度状态（首次答题为 None）
            is_correct: 是否答对
            now: 当前时间（默认为当前 UTC 时间）

        Returns:
            ScheduleResult: 新状态、下次复习日期与本次复习时间
        """
        if now is None:
            now = datetime.utcnow()

        new_state = cls.apply_grade(state, cls.grade_for(is_correct))
        next_review = now.date() + timedelta(days=new_state.interval_days)
        return ScheduleResult(
            ease_factor=new_state.ease_factor,
            interval_days=new_state.interval_days,
            repetitions=new_state.repetitions,
            next_review=next_review,
            last_reviewed=now,
        )

    @classmethod
    def is_mastered(cls, repetitions: int, interval_days: int) -> bool:
        """已掌握：连续答对 >= 3 次且间隔 >= 21 天"""
        return (
            repetitions >= cls.MASTERED_MIN_REPETITIONS
            and interval_days >= cls.MASTERED_MIN_INTERVAL
        )

    @classmethod
    def stage_label(cls, repetitions: Optional[int], interval_days: Optional[int] = None) -> str:
        """
        获取复习阶段标签

        - new: 没有调度记录
        - learning: 连续答对 < 3 次
        - reviewing: 连续答对 >= 3 次
        - mastered: 统计口径，见 is_mastered
        """
        if repetitions is None:
            return "new"
        if interval_days is not None and cls.is_mastered(repetitions, interval_days):
            return "mastered"
        if repetitions >= cls.MASTERED_MIN_REPETITIONS:
            return "reviewing"
        return "learning"
