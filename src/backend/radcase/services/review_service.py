"""
SM-2 复习调度服务
答题记录 + 到期病例选取
"""
import logging
import os
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from radcase.core.exceptions import AttemptValidationError, CaseNotFoundError
from radcase.core.sm2 import SM2Scheduler, SM2State
from radcase.models import Case, QuizAttempt, UserCaseProgress
from radcase.services.review_repository import ReviewRepository
from radcase.services.user_service import UserService

logger = logging.getLogger(__name__)


FALLBACK_REVIEW_LIMIT = 10


def parse_review_limit(raw: Optional[str]) -> int:
    """
    解析 REVIEW_DEFAULT_LIMIT

    未设置、不是整数或为负数时回退到 10
    """
    if raw is None or not raw.strip():
        return FALLBACK_REVIEW_LIMIT
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"REVIEW_DEFAULT_LIMIT 不是整数: {raw!r}，使用默认值 {FALLBACK_REVIEW_LIMIT}")
        return FALLBACK_REVIEW_LIMIT
    if value < 0:
        logger.warning(f"REVIEW_DEFAULT_LIMIT 不能为负数: {value}，使用默认值 {FALLBACK_REVIEW_LIMIT}")
        return FALLBACK_REVIEW_LIMIT
    return value


# 默认每次复习的病例数（启动时解析一次）
DEFAULT_REVIEW_LIMIT = parse_review_limit(os.getenv("REVIEW_DEFAULT_LIMIT"))


def _to_state(progress: Optional[UserCaseProgress]) -> Optional[SM2State]:
    if progress is None:
        return None
    return SM2State(
        ease_factor=progress.ease_factor,
        interval_days=progress.interval_days,
        repetitions=progress.repetitions,
    )


class ReviewService:
    """SM-2 复习服务"""

    @staticmethod
    def update_schedule(
        db: Session,
        user_id: str,
        case_id: str,
        is_correct: bool,
        now: Optional[datetime] = None
    ) -> UserCaseProgress:
        """
        根据答题结果更新学员在该病例上的复习进度

        调用方需保证病例和学员存在；只 flush 不 commit。

        Args:
            db: 数据库会话
            user_id: 学员ID
            case_id: 病例ID
            is_correct: 是否答对
            now: 当前时间（默认为当前 UTC 时间）

        Returns:
            UserCaseProgress: 更新后的复习进度
        """
        repo = ReviewRepository(db)
        prior = repo.get_review_state(user_id, case_id)
        result = SM2Scheduler.calculate_next_review(_to_state(prior), is_correct, now)

        logger.debug(
            f"SM-2 更新: user={user_id}, case={case_id}, correct={is_correct}, "
            f"prior={_to_state(prior)}, new={result.state}, next_review={result.next_review}"
        )

        progress = repo.upsert_review_state(user_id, case_id, result)
        db.flush()
        return progress

    @staticmethod
    def record_attempt(
        db: Session,
        case_id: Optional[str],
        correct: bool,
        time_spent_ms: Optional[int] = None,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> dict:
        """
        记录答题并更新复习进度

        - 每次答题都追加一条 QuizAttempt
        - 提供了 user_id 时按 SM-2 更新 UserCaseProgress
        - 校验失败时不写入任何数据

        Args:
            db: 数据库会话
            case_id: 病例ID
            correct: 是否答对
            time_spent_ms: 用时（毫秒，可选）
            user_id: 学员ID（可选，匿名答题不参与调度）
            now: 当前时间（默认为当前 UTC 时间）

        Returns:
            dict: {"attempt": QuizAttempt, "progress": UserCaseProgress | None}

        Raises:
            AttemptValidationError: 缺少 case_id
            CaseNotFoundError: 病例不存在
            AuthenticationRequiredError: user_id 对应的学员不存在
        """
        if not case_id or not str(case_id).strip():
            raise AttemptValidationError("case_id is required")

        if db.get(Case, case_id) is None:
            logger.warning(f"答题记录被拒绝，病例不存在: case={case_id}")
            raise CaseNotFoundError(case_id)

        if user_id:
            UserService.require_user(db, user_id)

        if now is None:
            now = datetime.utcnow()

        attempt = QuizAttempt(
            case_id=case_id,
            user_id=user_id or None,
            correct=bool(correct),
            time_spent_ms=time_spent_ms,
            attempted_at=now,
        )
        db.add(attempt)

        progress = None
        if user_id:
            progress = ReviewService.update_schedule(db, user_id, case_id, bool(correct), now)

        # 答题记录和复习进度在同一事务中提交
        db.commit()
        db.refresh(attempt)
        if progress is not None:
            db.refresh(progress)

        logger.info(
            f"答题已记录: attempt={attempt.id}, case={case_id}, user={user_id or 'anonymous'}, correct={attempt.correct}"
        )
        return {"attempt": attempt, "progress": progress}

    @staticmethod
    def select_due_cases(
        db: Session,
        user_id: Optional[str],
        limit: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> dict:
        """
        获取学员的复习病例

        优先级：
        1. 到期病例（next_review <= 今天），逾期最久的在前
        2. 从未做过的病例（随机抽取），补足剩余名额

        Args:
            db: 数据库会话
            user_id: 学员ID（必需）
            limit: 批次大小（默认 REVIEW_DEFAULT_LIMIT）
            now: 当前时间（默认为当前 UTC 时间）

        Returns:
            dict: {
                "due_cases": [病例摘要 + next_review/repetitions/interval_days],
                "new_cases": [病例摘要],
                "total_due": int,
                "total_new": int
            }

        Raises:
            AuthenticationRequiredError: 未提供学员或学员不存在
            AttemptValidationError: limit 为负数
        """
        UserService.require_user(db, user_id)

        if limit is None:
            limit = DEFAULT_REVIEW_LIMIT
        if limit < 0:
            raise AttemptValidationError("limit must be a non-negative integer")
        if now is None:
            now = datetime.utcnow()

        if limit == 0:
            return {"due_cases": [], "new_cases": [], "total_due": 0, "total_new": 0}

        repo = ReviewRepository(db)
        due_rows = repo.list_due_review_states(user_id, now.date(), limit)

        due_cases = []
        for case, progress in due_rows:
            item = case.to_summary()
            item.update({
                "next_review": progress.next_review,
                "repetitions": progress.repetitions,
                "interval_days": progress.interval_days,
                "ease_factor": progress.ease_factor,
                "stage": SM2Scheduler.stage_label(progress.repetitions, progress.interval_days),
            })
            due_cases.append(item)

        remaining = max(0, limit - len(due_cases))
        new_cases = []
        if remaining > 0:
            new_cases = [c.to_summary() for c in repo.list_unattempted_cases(user_id, remaining)]

        logger.info(
            f"复习病例选取: user={user_id}, limit={limit}, due={len(due_cases)}, new={len(new_cases)}"
        )
        return {
            "due_cases": due_cases,
            "new_cases": new_cases,
            "total_due": len(due_cases),
            "total_new": len(new_cases),
        }
