"""
复习进度存储
封装 user_case_progress 的读写，按请求注入数据库会话
"""
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from radcase.core.sm2 import ScheduleResult
from radcase.models import Case, UserCaseProgress


class ReviewRepository:
    """复习进度仓储"""

    def __init__(self, db: Session):
        self.db = db

    def get_review_state(self, user_id: str, case_id: str) -> Optional[UserCaseProgress]:
        """获取 (学员, 病例) 的复习进度，不存在表示新病例"""
        return self.db.get(UserCaseProgress, (user_id, case_id))

    def upsert_review_state(self, user_id: str, case_id: str, result: ScheduleResult) -> UserCaseProgress:
        """
        写入调度结果（存在则覆盖）

        不提交事务，由调用方统一 commit
        """
        return self.db.merge(UserCaseProgress(
            user_id=user_id,
            case_id=case_id,
            ease_factor=result.ease_factor,
            interval_days=result.interval_days,
            repetitions=result.repetitions,
            next_review=result.next_review,
            last_reviewed=result.last_reviewed,
        ))

    def list_due_review_states(
        self,
        user_id: str,
        today: date,
        limit: int
    ) -> List[Tuple[Case, UserCaseProgress]]:
        """
        获取到期的复习进度

        next_review <= today，按 next_review 升序（逾期最久的在前）
        """
        return (
            self.db.query(Case, UserCaseProgress)
            .join(UserCaseProgress, UserCaseProgress.case_id == Case.id)
            .filter(
                UserCaseProgress.user_id == user_id,
                UserCaseProgress.next_review <= today
            )
            .order_by(UserCaseProgress.next_review.asc(), UserCaseProgress.last_reviewed.asc())
            .limit(limit)
            .all()
        )

    def list_unattempted_cases(self, user_id: str, limit: int) -> List[Case]:
        """随机抽取学员从未做过的病例"""
        attempted = self.db.query(UserCaseProgress.case_id).filter(
            UserCaseProgress.user_id == user_id
        )
        return (
            self.db.query(Case)
            .filter(~Case.id.in_(attempted))
            .order_by(func.random())
            .limit(limit)
            .all()
        )
