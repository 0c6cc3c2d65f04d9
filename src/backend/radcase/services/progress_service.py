"""
学习进度与答题统计服务
"""
from typing import Optional

from sqlalchemy import case as sql_case, func, and_, or_
from sqlalchemy.orm import Session

from radcase.core.sm2 import SM2Scheduler
from radcase.models import Case, QuizAttempt, UserCaseProgress
from radcase.services.user_service import UserService


_correct_as_int = sql_case((QuizAttempt.correct == True, 1), else_=0)


class ProgressService:
    """进度统计服务"""

    STREAK_DAYS = 30
    RECENT_MISSES_LIMIT = 5

    @staticmethod
    def get_progress_summary(db: Session, user_id: Optional[str]) -> dict:
        """
        获取学员学习进度汇总

        Returns:
            dict: 答题数、正确数、正确率（百分比取整）、做过的病例数、
                  已掌握/学习中的病例数、最近 30 个有答题的日期
        """
        UserService.require_user(db, user_id)

        total_attempts, correct_count, unique_cases = db.query(
            func.count(QuizAttempt.id),
            func.sum(_correct_as_int),
            func.count(QuizAttempt.case_id.distinct())
        ).filter(QuizAttempt.user_id == user_id).one()
        total_attempts = total_attempts or 0
        correct_count = int(correct_count or 0)

        day = func.date(QuizAttempt.attempted_at)
        streak_rows = (
            db.query(day.label("day"), func.count(QuizAttempt.id).label("attempts"))
            .filter(QuizAttempt.user_id == user_id)
            .group_by(day)
            .order_by(day.desc())
            .limit(ProgressService.STREAK_DAYS)
            .all()
        )

        mastered_condition = and_(
            UserCaseProgress.repetitions >= SM2Scheduler.MASTERED_MIN_REPETITIONS,
            UserCaseProgress.interval_days >= SM2Scheduler.MASTERED_MIN_INTERVAL
        )
        mastered_cases = db.query(func.count()).select_from(UserCaseProgress).filter(
            UserCaseProgress.user_id == user_id,
            mastered_condition
        ).scalar() or 0
        learning_cases = db.query(func.count()).select_from(UserCaseProgress).filter(
            UserCaseProgress.user_id == user_id,
            UserCaseProgress.repetitions > 0,
            or_(
                UserCaseProgress.repetitions < SM2Scheduler.MASTERED_MIN_REPETITIONS,
                UserCaseProgress.interval_days < SM2Scheduler.MASTERED_MIN_INTERVAL
            )
        ).scalar() or 0

        accuracy = int(correct_count * 100 / total_attempts + 0.5) if total_attempts else 0

        return {
            "total_attempts": total_attempts,
            "correct_count": correct_count,
            "accuracy": accuracy,
            "unique_cases": unique_cases or 0,
            "mastered_cases": mastered_cases,
            "learning_cases": learning_cases,
            "streak_data": [{"day": str(d), "attempts": n} for d, n in streak_rows],
        }

    @staticmethod
    def get_quiz_stats(db: Session, user_id: Optional[str] = None) -> dict:
        """
        获取答题统计

        提供 user_id 时只统计该学员，否则统计全部答题记录

        Returns:
            dict: {
                "overall": {"total_attempts", "correct_count", "avg_time_ms"},
                "by_difficulty": [...],
                "recent_misses": [...],  # 答错次数最多的 5 个病例
                "is_personal": bool
            }
        """
        def scoped(query):
            if user_id:
                query = query.filter(QuizAttempt.user_id == user_id)
            return query

        total_attempts, correct_count, avg_time_ms = scoped(db.query(
            func.count(QuizAttempt.id),
            func.sum(_correct_as_int),
            func.avg(QuizAttempt.time_spent_ms)
        )).one()

        by_difficulty = (
            scoped(
                db.query(
                    Case.difficulty,
                    func.count(QuizAttempt.id),
                    func.sum(_correct_as_int),
                    func.avg(QuizAttempt.time_spent_ms)
                ).select_from(QuizAttempt).join(Case, QuizAttempt.case_id == Case.id)
            )
            .group_by(Case.difficulty)
            .order_by(Case.difficulty)
            .all()
        )

        miss_count = func.count(QuizAttempt.id).label("miss_count")
        recent_misses = (
            scoped(
                db.query(Case.id, Case.title, Case.diagnosis, Case.difficulty, miss_count)
                .select_from(QuizAttempt)
                .join(Case, QuizAttempt.case_id == Case.id)
                .filter(QuizAttempt.correct == False)
            )
            .group_by(Case.id, Case.title, Case.diagnosis, Case.difficulty)
            .order_by(miss_count.desc(), func.max(QuizAttempt.attempted_at).desc())
            .limit(ProgressService.RECENT_MISSES_LIMIT)
            .all()
        )

        return {
            "overall": {
                "total_attempts": total_attempts or 0,
                "correct_count": int(correct_count or 0),
                "avg_time_ms": float(avg_time_ms) if avg_time_ms is not None else None,
            },
            "by_difficulty": [
                {
                    "difficulty": difficulty,
                    "attempts": attempts,
                    "correct": int(correct or 0),
                    "avg_time_ms": float(avg_ms) if avg_ms is not None else None,
                }
                for difficulty, attempts, correct, avg_ms in by_difficulty
            ],
            "recent_misses": [
                {
                    "id": cid,
                    "title": title,
                    "diagnosis": diagnosis,
                    "difficulty": difficulty,
                    "miss_count": misses,
                }
                for cid, title, diagnosis, difficulty, misses in recent_misses
            ],
            "is_personal": bool(user_id),
        }
