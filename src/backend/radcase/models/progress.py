"""
学员病例复习进度模型（SM-2）
每个 (学员, 病例) 只有一条记录，答题时原地覆盖
"""
from sqlalchemy import Column, String, Integer, Float, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base


class UserCaseProgress(Base):
    """
    学员病例复习进度

    字段说明：
    - ease_factor: 难度系数，初始 2.5，下限 1.3
    - interval_days: 距下次复习的天数，>= 1
    - repetitions: 连续答对次数，答错清零
    - next_review: 下次复习日期（不含时间）
    - last_reviewed: 最近一次答题时间
    """
    __tablename__ = "user_case_progress"
    __table_args__ = (
        Index("idx_user_progress", "user_id", "next_review"),
    )

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), primary_key=True)
    ease_factor = Column(Float, default=2.5, nullable=False)
    interval_days = Column(Integer, default=1, nullable=False)
    repetitions = Column(Integer, default=0, nullable=False)
    next_review = Column(Date, nullable=True)
    last_reviewed = Column(DateTime, nullable=True)

    # 关系
    user = relationship("User", back_populates="progress")
    case = relationship("Case", back_populates="progress")

    def __repr__(self):
        return (
            f"<UserCaseProgress(user='{self.user_id}' case='{self.case_id}' "
            f"ef={self.ease_factor} interval={self.interval_days} reps={self.repetitions} next={self.next_review})>"
        )
