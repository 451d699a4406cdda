"""
애플리케이션 설정 파일
환경 변수를 통해 설정 관리
"""
from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 데이터베이스 설정
    database_url: str = "sqlite:///./kiosk.db"

    # 애플리케이션 설정
    app_name: str = "Visitor Check-in Kiosk"
    debug: bool = False
    log_level: str = "INFO"

    # CORS 설정
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:8080"]

    # 관리자 세션 설정
    admin_password: Optional[str] = None
    admin_session_secret: Optional[str] = None
    admin_session_max_age_hours: int = 8
    session_cookie_secure: bool = False
    jwt_algorithm: str = "HS256"

    # 사진 저장소 (S3 호환) 설정
    s3_bucket: Optional[str] = None
    s3_endpoint: Optional[str] = None
    s3_region: str = "auto"
    s3_access_key_id: Optional[str] = None
    s3_secret_access_key: Optional[str] = None
    photo_url_expires_seconds: int = 3600

    # CRM 연동 설정
    crm_provider: str = "NONE"
    crm_webhook_url: Optional[str] = None
    crm_timeout_seconds: float = 5.0

    # 방문 사유 규칙
    featured_ttl_hours: int = 48
    max_featured_reasons: int = 3
    promotion_threshold: int = 2  # 이전 일치 횟수 (3번째 입력부터 승격)

    class Config:
        # 실행 위치와 무관하게 "프로젝트 루트의 .env"를 찾도록 고정
        env_file = str(Path(__file__).resolve().parents[1] / ".env")
        case_sensitive = False


settings = Settings()
