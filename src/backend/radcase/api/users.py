"""
学员管理API路由
支持Dev模式（免注册快速体验）
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from radcase.core.database import get_db
from radcase.services import UserService


router = APIRouter(prefix="/users", tags=["学员管理"])


# Schemas
class UserCreateRequest(BaseModel):
    """创建学员请求"""
    username: Optional[str] = None
    display_name: Optional[str] = None
    role: str = "resident"


class UserResponse(BaseModel):
    """学员响应"""
    id: str
    username: str
    display_name: Optional[str]
    role: Optional[str]
    created_at: Optional[datetime]
    last_login: Optional[datetime]

    class Config:
        from_attributes = True


# Endpoints
@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_or_get_user(request: UserCreateRequest, db: Session = Depends(get_db)):
    """
    获取或创建学员（Dev模式）

    用户名已存在时直接返回该学员
    """
    user = UserService.get_or_create_user(
        db,
        username=request.username,
        display_name=request.display_name,
        role=request.role
    )
    UserService.update_last_login(db, user.id)
    return user


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: Session = Depends(get_db)):
    """获取学员信息"""
    user = UserService.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
