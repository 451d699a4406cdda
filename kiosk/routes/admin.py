"""
관리자 API 라우트
로그인, 방문 사유 관리, 최근 방문 조회
"""
import logging
from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session
from typing import List
from kiosk.config import Settings
from kiosk.database import get_db
from kiosk.dependencies import get_current_admin, get_photo_storage, get_settings
from kiosk.schemas.admin import AdminLogin, AdminSessionResponse
from kiosk.schemas.visit import AdminVisitResponse
from kiosk.schemas.visit_reason import INT32_MAX, VisitReasonCreate, VisitReasonUpdate, VisitReasonResponse
from kiosk.security.auth import (
    ADMIN_SESSION_COOKIE,
    AuthConfigError,
    create_admin_session_token,
    verify_admin_password,
)
from kiosk.services.reason_service import ReasonService
from kiosk.services.visit_service import VisitService
from kiosk.storage.photos import PhotoStorage
from kiosk.utils.exceptions import ServerErrorException, UnauthorizedException

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"]
)


@router.post("/login", response_model=AdminSessionResponse)
def login(
        login_data: AdminLogin,
        response: Response,
        settings: Settings = Depends(get_settings)
):
    """관리자 로그인 및 세션 쿠키 발급"""
    try:
        if not verify_admin_password(settings, login_data.password):
            raise UnauthorizedException(detail="Invalid password")
        token = create_admin_session_token(settings)
    except AuthConfigError as e:
        logger.error(f"Admin login unavailable: {e}")
        raise ServerErrorException(detail=str(e))

    response.set_cookie(
        key=ADMIN_SESSION_COOKIE,
        value=token,
        max_age=settings.admin_session_max_age_hours * 3600,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return {"ok": True}


@router.post("/logout", response_model=AdminSessionResponse)
def logout(response: Response):
    """세션 쿠키 삭제"""
    response.delete_cookie(key=ADMIN_SESSION_COOKIE, path="/")
    return {"ok": True}


@router.get("/visit-reasons", response_model=List[VisitReasonResponse], dependencies=[Depends(get_current_admin)])
def list_visit_reasons(db: Session = Depends(get_db)):
    """전체 방문 사유 목록 (비활성 포함)"""
    return ReasonService.list_all_reasons(db)


@router.post(
    "/visit-reasons",
    response_model=VisitReasonResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_admin)]
)
def create_visit_reason(
        reason_data: VisitReasonCreate,
        db: Session = Depends(get_db)
):
    """방문 사유 생성"""
    reason = ReasonService.create_reason(db, reason_data)
    return ReasonService.to_admin_response(reason)


@router.patch(
    "/visit-reasons/{reason_id}",
    response_model=VisitReasonResponse,
    dependencies=[Depends(get_current_admin)]
)
def update_visit_reason(
        reason_data: VisitReasonUpdate,
        reason_id: int = Path(..., ge=1, le=INT32_MAX),
        db: Session = Depends(get_db)
):
    """
    방문 사유 수정
    - featured=true는 48시간 이내 추천 사유가 이미 3개면 400으로 거부됩니다.
    """
    reason = ReasonService.update_reason(db, reason_id, reason_data)
    return ReasonService.to_admin_response(reason)


@router.get("/visits", response_model=List[AdminVisitResponse], dependencies=[Depends(get_current_admin)])
def list_recent_visits(
        db: Session = Depends(get_db),
        storage: PhotoStorage = Depends(get_photo_storage)
):
    """최근 방문 50건"""
    return VisitService.list_recent_visits(db, storage)
