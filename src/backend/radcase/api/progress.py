"""
学习进度API路由
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from radcase.core.database import get_db
from radcase.core.exceptions import RadCaseError
from radcase.services import ProgressService


router = APIRouter(prefix="/progress", tags=["学习进度"])


class StreakDay(BaseModel):
    day: str
    attempts: int


class ProgressResponse(BaseModel):
    """学习进度响应"""
    total_attempts: int
    correct_count: int
    accuracy: int
    unique_cases: int
    mastered_cases: int
    learning_cases: int
    streak_data: List[StreakDay]


@router.get("", response_model=ProgressResponse)
async def get_progress(user_id: Optional[str] = None, db: Session = Depends(get_db)):
    """获取学员学习进度汇总"""
    try:
        return ProgressService.get_progress_summary(db, user_id)
    except RadCaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
