"""
인증 의존성 및 외부 연동 핸들 주입
FastAPI 의존성 주입 패턴 사용
"""
import logging
from typing import Optional
from fastapi import Cookie, Depends, Request
from kiosk.config import Settings
from kiosk.security.auth import ADMIN_SESSION_COOKIE, AuthConfigError, verify_admin_session_token
from kiosk.schemas.admin import TokenPayload
from kiosk.services.crm import CrmClient
from kiosk.storage.photos import PhotoStorage
from kiosk.utils.exceptions import UnauthorizedException, ServerErrorException

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """앱에 주입된 설정"""
    return request.app.state.settings


def get_photo_storage(request: Request) -> PhotoStorage:
    """사진 저장소 핸들"""
    return request.app.state.photo_storage


def get_crm(request: Request) -> CrmClient:
    """CRM 클라이언트"""
    return request.app.state.crm_client


def get_current_admin(
        settings: Settings = Depends(get_settings),
        admin_session: Optional[str] = Cookie(None, alias=ADMIN_SESSION_COOKIE)
) -> TokenPayload:
    """
    관리자 세션 확인
    - 쿠키 누락, 형식 오류, 서명 불일치, 만료 모두 같은 401로 응답합니다.
    """
    try:
        token_payload = verify_admin_session_token(settings, admin_session)
    except AuthConfigError:
        logger.error("Admin session secret is not configured")
        raise ServerErrorException(detail="Admin authentication is not configured")

    if not token_payload:
        raise UnauthorizedException()
    return token_payload
