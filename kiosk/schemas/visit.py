"""
방문 기록 관련 Pydantic 스키마 (API 요청/응답)
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional
from enum import Enum
import re
from kiosk.schemas.visit_reason import INT32_MAX
from kiosk.utils.text import normalize_text


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class VisitSource(str, Enum):
    """방문 등록 경로"""
    KIOSK = "KIOSK"
    MANUAL = "MANUAL"
    API = "API"


class VisitCreate(BaseModel):
    """방문 등록 요청"""
    full_name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=200)
    photo_data_url: Optional[str] = None
    visit_reason_id: Optional[int] = Field(None, ge=1, le=INT32_MAX)
    custom_reason: Optional[str] = Field(None, max_length=200)
    source: VisitSource = VisitSource.KIOSK

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name is required")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not _EMAIL_RE.match(v):
            raise ValueError("Invalid email format")
        return v

    @field_validator("custom_reason")
    @classmethod
    def validate_custom_reason(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = normalize_text(v)
        return v or None

    @field_validator("photo_data_url")
    @classmethod
    def validate_photo(cls, v: Optional[str]) -> Optional[str]:
        # 빈 문자열은 사진 없음으로 취급
        return v or None

    @model_validator(mode="after")
    def check_single_reason(self):
        if self.visit_reason_id is not None and self.custom_reason is not None:
            raise ValueError("Provide either visit_reason_id or custom_reason, not both")
        return self


class VisitCreatedResponse(BaseModel):
    """방문 등록 응답"""
    id: int
    photo_url: Optional[str] = None


class AdminVisitResponse(BaseModel):
    """관리자용 방문 기록 응답"""
    id: int
    full_name: str
    email: str
    visit_reason_label: Optional[str]
    source: VisitSource
    created_at: datetime
    photo_url: Optional[str] = None
