"""
Models package
Export all database models
"""
import logging

from .base import Base
from .user import User
from .case import Case
from .progress import UserCaseProgress
from .quiz_attempt import QuizAttempt

__all__ = [
    "Base",
    "User",
    "Case",
    "UserCaseProgress",
    "QuizAttempt",
]

logger = logging.getLogger(__name__)


def init_db(bind=None, reset: bool = False):
    """
    初始化数据库

    Args:
        bind: 目标引擎（默认为 DATABASE_URL 对应的引擎）
        reset: 是否先删除所有表（仅开发测试用，会清空数据）
    """
    if bind is None:
        from ..core.database import engine as bind

    if reset:
        Base.metadata.drop_all(bind=bind)
        logger.warning("All tables dropped")

    # 创建所有表
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created successfully")
