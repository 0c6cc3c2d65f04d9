"""
学员管理模块
Dev模式：调用方直接传入学员ID，不做密码校验
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from radcase.core.exceptions import AuthenticationRequiredError
from radcase.models import User

logger = logging.getLogger(__name__)


class UserService:
    """学员服务"""

    @staticmethod
    def get_or_create_user(
        db: Session,
        username: Optional[str] = None,
        display_name: Optional[str] = None,
        role: str = "resident"
    ) -> User:
        """
        获取或创建学员（Dev模式）

        - 提供 username 时，按用户名查找，不存在则创建
        - 未提供时，创建随机用户名的新学员

        Args:
            db: 数据库会话
            username: 用户名（可选）
            display_name: 显示名（可选）
            role: 角色

        Returns:
            User: 学员对象
        """
        if username:
            user = db.query(User).filter(User.username == username).first()
            if user:
                return user
        else:
            username = f"resident_{uuid.uuid4().hex[:8]}"

        user = User(
            id=str(uuid.uuid4()),
            username=username,
            display_name=display_name or username,
            role=role,
            created_at=datetime.utcnow()
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"创建学员: id={user.id}, username={user.username}")
        return user

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        """获取学员"""
        return db.get(User, user_id)

    @staticmethod
    def require_user(db: Session, user_id: Optional[str]) -> User:
        """
        校验学员身份

        Raises:
            AuthenticationRequiredError: 未提供学员ID或学员不存在
        """
        if not user_id:
            logger.warning("请求缺少学员身份")
            raise AuthenticationRequiredError("Authentication required")

        user = db.get(User, user_id)
        if user is None:
            logger.warning(f"学员不存在: user={user_id}")
            raise AuthenticationRequiredError("Authentication required")
        return user

    @staticmethod
    def update_last_login(db: Session, user_id: str):
        """更新学员最后登录时间"""
        user = db.get(User, user_id)
        if user:
            user.last_login = datetime.utcnow()
            db.commit()
