"""
病例服务
病例的增删改查与随机抽题
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from radcase.core.exceptions import AttemptValidationError, CaseNotFoundError
from radcase.models import Case

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "modality",
    "body_part",
    "diagnosis",
    "difficulty",
    "clinical_history",
    "teaching_points",
    "findings",
)


class CaseService:
    """病例服务"""

    @staticmethod
    def _apply_filters(
        query,
        modality: Optional[str],
        body_part: Optional[str],
        difficulty: Optional[int],
        search: Optional[str] = None
    ):
        if modality:
            query = query.filter(Case.modality == modality)
        if body_part:
            query = query.filter(Case.body_part == body_part)
        if difficulty:
            query = query.filter(Case.difficulty == difficulty)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Case.title.ilike(pattern),
                Case.diagnosis.ilike(pattern),
                Case.clinical_history.ilike(pattern)
            ))
        return query

    @staticmethod
    def get_case(db: Session, case_id: str) -> Case:
        """
        获取病例

        Raises:
            CaseNotFoundError: 病例不存在
        """
        case = db.get(Case, case_id)
        if case is None:
            raise CaseNotFoundError(case_id)
        return case

    @staticmethod
    def list_cases(
        db: Session,
        modality: Optional[str] = None,
        body_part: Optional[str] = None,
        difficulty: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> dict:
        """
        分页列出病例（按创建时间倒序）

        Args:
            db: 数据库会话
            modality / body_part / difficulty: 精确过滤
            search: 在标题、诊断、病史中模糊匹配（不区分大小写）
            limit: 每页数量
            offset: 偏移量

        Returns:
            dict: {"cases": List[Case], "total": 过滤后的总数}
        """
        query = CaseService._apply_filters(db.query(Case), modality, body_part, difficulty, search)
        total = query.count()
        cases = query.order_by(Case.created_at.desc(), Case.id).offset(offset).limit(limit).all()
        return {"cases": cases, "total": total}

    @staticmethod
    def get_random_case(
        db: Session,
        modality: Optional[str] = None,
        body_part: Optional[str] = None,
        difficulty: Optional[int] = None
    ) -> Optional[Case]:
        """随机抽取一道病例题，没有符合条件的病例时返回 None"""
        query = CaseService._apply_filters(db.query(Case), modality, body_part, difficulty)
        return query.order_by(func.random()).first()

    @staticmethod
    def create_case(db: Session, title: str, **fields) -> Case:
        """
        创建病例

        Args:
            db: 数据库会话
            title: 标题（必填）
            **fields: modality / body_part / diagnosis / difficulty 等可选字段

        Returns:
            Case: 新病例
        """
        if not title or not title.strip():
            raise AttemptValidationError("title is required")

        case = Case(
            id=fields.pop("id", None) or str(uuid.uuid4()),
            title=title.strip(),
            created_at=datetime.utcnow(),
            **fields
        )
        db.add(case)
        db.commit()
        db.refresh(case)
        return case

    @staticmethod
    def update_case(db: Session, case_id: str, **fields) -> Case:
        """
        更新病例（只更新传入的字段）

        Raises:
            CaseNotFoundError: 病例不存在
            AttemptValidationError: 标题为空
        """
        case = CaseService.get_case(db, case_id)

        if "title" in fields:
            title = (fields["title"] or "").strip()
            if not title:
                raise AttemptValidationError("title is required")
            fields["title"] = title

        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(case, key, value)
        case.updated_at = datetime.utcnow()

        db.commit()
        db.refresh(case)
        return case

    @staticmethod
    def delete_case(db: Session, case_id: str) -> None:
        """
        删除病例

        复习进度和答题记录由外键 ON DELETE CASCADE 一并删除

        Raises:
            CaseNotFoundError: 病例不存在
        """
        case = CaseService.get_case(db, case_id)
        db.delete(case)
        db.commit()
        logger.info(f"病例已删除: case={case_id}")
