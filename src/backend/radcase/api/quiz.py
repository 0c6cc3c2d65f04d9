"""
病例答题API路由
答题记录、随机抽题与答题统计
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from radcase.core.database import get_db
from radcase.core.exceptions import RadCaseError
from radcase.services import CaseService, ProgressService, ReviewService


router = APIRouter(prefix="/quiz", tags=["病例答题"])


# Schemas
class AttemptRequest(BaseModel):
    """答题提交请求"""
    case_id: Optional[str] = None
    correct: bool = False
    time_spent_ms: Optional[int] = None


class ScheduleInfo(BaseModel):
    """复习进度"""
    ease_factor: float
    interval_days: int
    repetitions: int
    next_review: Optional[str]


class AttemptResponse(BaseModel):
    """答题提交响应"""
    message: str
    attempt_id: int
    schedule: Optional[ScheduleInfo] = None


class QuizCaseResponse(BaseModel):
    """抽题响应"""
    id: str
    title: str
    modality: Optional[str]
    body_part: Optional[str]
    diagnosis: Optional[str]
    difficulty: Optional[int]
    clinical_history: Optional[str]
    teaching_points: Optional[str]
    findings: Optional[str]

    class Config:
        from_attributes = True


# Endpoints
@router.post("/attempt", response_model=AttemptResponse, status_code=status.HTTP_201_CREATED)
async def submit_attempt(
    request: AttemptRequest,
    user_id: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    提交答题结果

    匿名答题只记录；提供 user_id 时同时更新 SM-2 复习进度
    """
    try:
        result = ReviewService.record_attempt(
            db,
            case_id=request.case_id,
            correct=request.correct,
            time_spent_ms=request.time_spent_ms,
            user_id=user_id
        )
    except RadCaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    progress = result["progress"]
    schedule = None
    if progress is not None:
        schedule = ScheduleInfo(
            ease_factor=progress.ease_factor,
            interval_days=progress.interval_days,
            repetitions=progress.repetitions,
            next_review=progress.next_review.isoformat() if progress.next_review else None
        )
    return AttemptResponse(
        message="Attempt recorded",
        attempt_id=result["attempt"].id,
        schedule=schedule
    )


@router.get("/random", response_model=QuizCaseResponse)
async def get_random_case(
    modality: Optional[str] = None,
    body_part: Optional[str] = None,
    difficulty: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """按条件随机抽取一道病例题"""
    case = CaseService.get_random_case(db, modality, body_part, difficulty)
    if case is None:
        raise HTTPException(status_code=404, detail="No cases found matching criteria")
    return case


@router.get("/stats")
async def get_quiz_stats(user_id: Optional[str] = None, db: Session = Depends(get_db)):
    """获取答题统计（提供 user_id 时为个人统计）"""
    return ProgressService.get_quiz_stats(db, user_id)
