"""
答题记录模型
记录每次答题，只追加不修改
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class QuizAttempt(Base):
    """
    答题记录（每次答题都创建新记录，永不更新）

    user_id 可为空：匿名答题只记录，不参与复习调度
    """
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    correct = Column(Boolean, nullable=False)
    time_spent_ms = Column(Integer, nullable=True)
    attempted_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    # 关系
    case = relationship("Case")

    def __repr__(self):
        return f"<QuizAttempt(id={self.id} case='{self.case_id}' user='{self.user_id}' correct={self.correct})>"
