"""
관리자 인증 관련 Pydantic 스키마 (API 요청/응답)
"""
from pydantic import BaseModel


class AdminLogin(BaseModel):
    """관리자 로그인 요청"""
    password: str = ""


class AdminSessionResponse(BaseModel):
    """로그인/로그아웃 결과"""
    ok: bool = True


class TokenPayload(BaseModel):
    """세션 토큰 페이로드"""
    sub: str
    exp: int
    iat: int
