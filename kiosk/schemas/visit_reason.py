"""
방문 사유 관련 Pydantic 스키마 (API 요청/응답)
"""
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional
from enum import Enum

# DB 정수 컬럼(32비트) 범위
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class ReasonSource(str, Enum):
    """사유 출처"""
    MANUAL = "MANUAL"
    LUMA = "LUMA"


class ReasonCategory(str, Enum):
    """사유 분류"""
    EVENT = "EVENT"
    GENERAL = "GENERAL"


def _strip_label(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Label is required")
    return v


class VisitReasonCreate(BaseModel):
    """방문 사유 생성 요청"""
    label: str = Field(..., max_length=200)
    slug: Optional[str] = Field(None, max_length=200)
    active: bool = True
    sort_order: int = Field(0, ge=INT32_MIN, le=INT32_MAX)
    source: ReasonSource = ReasonSource.MANUAL
    category: Optional[ReasonCategory] = None

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        return _strip_label(v)


class VisitReasonUpdate(BaseModel):
    """방문 사유 수정 (전달된 필드만 반영)"""
    label: Optional[str] = Field(None, max_length=200)
    active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=INT32_MIN, le=INT32_MAX)
    category: Optional[ReasonCategory] = None
    featured: Optional[bool] = None

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: Optional[str]) -> Optional[str]:
        return _strip_label(v)


class PublicVisitReasonResponse(BaseModel):
    """키오스크용 방문 사유 응답 (featured는 48시간 기준으로 계산된 값)"""
    id: int
    label: str
    slug: str
    featured: bool
    category: Optional[ReasonCategory]


class VisitReasonResponse(BaseModel):
    """관리자용 방문 사유 응답"""
    id: int
    label: str
    slug: str
    active: bool
    sort_order: int
    source: ReasonSource
    category: Optional[ReasonCategory]
    featured: bool
    featured_at: Optional[datetime]
    featured_active: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
