"""
复习调度API路由
SM-2 到期病例 + 新病例
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from radcase.core.database import get_db
from radcase.core.exceptions import RadCaseError
from radcase.services import ReviewService


router = APIRouter(prefix="/review", tags=["复习调度"])


# Schemas
class CaseSummary(BaseModel):
    """病例摘要"""
    id: str
    title: str
    modality: Optional[str] = None
    body_part: Optional[str] = None
    diagnosis: Optional[str] = None
    difficulty: Optional[int] = None
    clinical_history: Optional[str] = None
    teaching_points: Optional[str] = None
    findings: Optional[str] = None


class DueCase(CaseSummary):
    """到期病例（带复习进度）"""
    next_review: date
    repetitions: int
    interval_days: int
    ease_factor: float
    stage: str


class DueCasesResponse(BaseModel):
    """复习病例响应"""
    due_cases: List[DueCase]
    new_cases: List[CaseSummary]
    total_due: int
    total_new: int


# Endpoints
@router.get("/due", response_model=DueCasesResponse)
async def get_due_cases(
    user_id: Optional[str] = None,
    limit: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """
    获取下一批复习病例

    先返回到期病例（逾期最久的在前），再用随机新病例补足 limit
    """
    try:
        return ReviewService.select_due_cases(db, user_id, limit)
    except RadCaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
