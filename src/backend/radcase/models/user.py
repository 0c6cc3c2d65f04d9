"""
学员模型
Dev模式下由调用方直接传入学员ID
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class User(Base):
    """学员模型"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    display_name = Column(String(100), nullable=True)
    role = Column(String(20), default="resident")  # 'resident' | 'attending' | 'admin'
    created_at = Column(DateTime, default=datetime.utcnow)
    last_login = Column(DateTime)

    # 关系
    progress = relationship("UserCaseProgress", back_populates="user", cascade="all", passive_deletes=True)

    def __repr__(self):
        return f"<User(id='{self.id}' username='{self.username}' role='{self.role}')>"
