"""
인증 및 보안 관련 함수
관리자 비밀번호 확인, 세션 토큰 생성 및 검증
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from pydantic import ValidationError
from kiosk.config import Settings
from kiosk.schemas.admin import TokenPayload

logger = logging.getLogger(__name__)

ADMIN_SESSION_COOKIE = "admin_session"
ADMIN_SUBJECT = "admin"


class AuthConfigError(RuntimeError):
    """관리자 인증 설정 누락"""


def _session_secret(settings: Settings) -> str:
    if not settings.admin_session_secret:
        raise AuthConfigError("ADMIN_SESSION_SECRET is not configured")
    return settings.admin_session_secret


def verify_admin_password(settings: Settings, password: str) -> bool:
    """관리자 비밀번호 검증 (상수 시간 비교)"""
    expected = settings.admin_password
    if not expected:
        raise AuthConfigError("ADMIN_PASSWORD is not configured on the server")
    return secrets.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))


def create_admin_session_token(settings: Settings, issued_at: Optional[datetime] = None) -> str:
    """관리자 세션 토큰 생성 (발급 시각 + 서명)"""
    if issued_at is None:
        issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(hours=settings.admin_session_max_age_hours)

    to_encode = {
        "sub": ADMIN_SUBJECT,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(to_encode, _session_secret(settings), algorithm=settings.jwt_algorithm)


def verify_admin_session_token(settings: Settings, token: Optional[str]) -> Optional[TokenPayload]:
    """세션 토큰 검증 및 페이로드 반환 (실패 사유와 무관하게 None)"""
    if not token:
        return None
    try:
        payload = jwt.decode(token, _session_secret(settings), algorithms=[settings.jwt_algorithm])
        token_payload = TokenPayload(**payload)
    except (JWTError, ValidationError):
        return None

    if token_payload.sub != ADMIN_SUBJECT:
        return None

    # 쿠키 max-age와 별개로 발급 시각 기준 만료를 한 번 더 확인
    now = datetime.now(timezone.utc).timestamp()
    if now - token_payload.iat > settings.admin_session_max_age_hours * 3600:
        return None

    return token_payload
