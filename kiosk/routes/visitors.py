"""
방문자 검색 API 라우트
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from kiosk.database import get_db
from kiosk.schemas.visitor import VisitorSuggestion
from kiosk.services.visitor_service import VisitorService

router = APIRouter(
    prefix="/api/visitors",
    tags=["Visitors"]
)


@router.get("/search", response_model=List[VisitorSuggestion])
def search_visitors(
        db: Session = Depends(get_db),
        q: str = Query("")
):
    """이름 자동완성 (3글자 이상, 최대 10건)"""
    return VisitorService.search_visitors(db, q)
