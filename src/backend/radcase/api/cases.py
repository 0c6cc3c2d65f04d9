"""
病例管理API
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from radcase.core.database import get_db
from radcase.core.exceptions import RadCaseError
from radcase.services import CaseService

router = APIRouter(prefix="/cases", tags=["病例管理"])


class CaseCreateRequest(BaseModel):
    """创建病例请求"""
    title: str
    modality: Optional[str] = None
    body_part: Optional[str] = None
    diagnosis: Optional[str] = None
    difficulty: int = Field(default=2, ge=1, le=5)
    clinical_history: Optional[str] = None
    teaching_points: Optional[str] = None
    findings: Optional[str] = None


class CaseUpdateRequest(BaseModel):
    """更新病例请求（未传入的字段保持不变）"""
    title: Optional[str] = None
    modality: Optional[str] = None
    body_part: Optional[str] = None
    diagnosis: Optional[str] = None
    difficulty: Optional[int] = Field(default=None, ge=1, le=5)
    clinical_history: Optional[str] = None
    teaching_points: Optional[str] = None
    findings: Optional[str] = None


class CaseListResponse(BaseModel):
    """病例列表响应"""
    cases: List[dict]
    total: int
    limit: int
    offset: int


@router.get("", response_model=CaseListResponse)
def list_cases(
    modality: Optional[str] = None,
    body_part: Optional[str] = None,
    difficulty: Optional[int] = None,
    search: Optional[str] = None,
    limit: int = Query(default=50, ge=0),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db)
):
    """
    获取病例列表

    search 在标题、诊断、病史中模糊匹配；total 为过滤后的总数
    """
    result = CaseService.list_cases(db, modality, body_part, difficulty, search, limit, offset)
    return CaseListResponse(
        cases=[c.to_summary() for c in result["cases"]],
        total=result["total"],
        limit=limit,
        offset=offset
    )


@router.get("/{case_id}", response_model=dict)
def get_case(case_id: str, db: Session = Depends(get_db)):
    """获取病例详情"""
    try:
        case = CaseService.get_case(db, case_id)
    except RadCaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    data = case.to_summary()
    data["created_at"] = case.created_at.isoformat() if case.created_at else None
    data["updated_at"] = case.updated_at.isoformat() if case.updated_at else None
    return data


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_case(request: CaseCreateRequest, db: Session = Depends(get_db)):
    """创建病例"""
    fields = request.model_dump()
    title = fields.pop("title")
    try:
        case = CaseService.create_case(db, title, **fields)
    except RadCaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return case.to_summary()


@router.put("/{case_id}", response_model=dict)
def update_case(case_id: str, request: CaseUpdateRequest, db: Session = Depends(get_db)):
    """更新病例"""
    try:
        case = CaseService.update_case(db, case_id, **request.model_dump(exclude_unset=True))
    except RadCaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return case.to_summary()


@router.delete("/{case_id}")
def delete_case(case_id: str, db: Session = Depends(get_db)):
    """删除病例（连同复习进度和答题记录）"""
    try:
        CaseService.delete_case(db, case_id)
    except RadCaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"message": "Case deleted"}
