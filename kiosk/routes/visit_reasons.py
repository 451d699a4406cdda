"""
방문 사유 조회 API 라우트 (키오스크용)
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from kiosk.database import get_db
from kiosk.models.visit_reason import ReasonCategory
from kiosk.schemas.visit_reason import PublicVisitReasonResponse
from kiosk.services.reason_service import ReasonService

router = APIRouter(
    prefix="/api/visit-reasons",
    tags=["Visit Reasons"]
)


@router.get("", response_model=List[PublicVisitReasonResponse])
def list_visit_reasons(
        db: Session = Depends(get_db),
        category: Optional[ReasonCategory] = Query(None)
):
    """
    활성 방문 사유 목록
    - featured는 지정 후 48시간 이내인 경우에만 true 입니다.
    """
    return ReasonService.list_active_reasons(db, category)
