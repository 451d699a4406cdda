import logging
from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from kiosk.config import Settings, settings as default_settings
from kiosk.database import Database
from kiosk.logging_config import configure_logging
from kiosk.services.crm import CrmClient, get_crm_client
from kiosk.storage.photos import PhotoStorage
from kiosk.routes.visit_reasons import router as visit_reasons_router
from kiosk.routes.visitors import router as visitors_router
from kiosk.routes.visits import router as visits_router
from kiosk.routes.admin import router as admin_router

# create_all 전에 모든 테이블이 메타데이터에 등록되어야 함
from kiosk.models import visit, visit_reason, crm_sync_event  # noqa: F401

logger = logging.getLogger(__name__)


def create_app(
        settings: Optional[Settings] = None,
        database: Optional[Database] = None,
        photo_storage: Optional[PhotoStorage] = None,
        crm_client: Optional[CrmClient] = None
) -> FastAPI:
    """애플리케이션 생성 (테스트에서는 저장소/CRM 핸들을 주입)"""
    settings = settings or default_settings
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """애플리케이션 라이프사이클 관리"""
        # 시작: 데이터베이스 핸들 생성 및 테이블 생성
        db = database or Database(settings.database_url)
        db.create_all()
        app.state.database = db
        app.state.photo_storage = photo_storage or PhotoStorage(settings)
        app.state.crm_client = crm_client or get_crm_client(settings, db.SessionLocal)
        logger.info("Database initialized")
        yield
        # 종료: 커넥션 풀 정리
        db.dispose()
        logger.info("Application shutdown")

    app = FastAPI(
        title=settings.app_name,
        description="방문자 체크인 키오스크 API",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings

    # CORS 미들웨어 설정
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        # 상세 내용은 서버 로그에만 남김
        logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # 헬스체크 엔드포인트
    @app.get("/api/health")
    async def health_check():
        """애플리케이션 상태 확인"""
        return {
            "status": "healthy",
            "app_name": settings.app_name,
            "version": "1.0.0"
        }

    # 라우터 등록
    app.include_router(visit_reasons_router)
    app.include_router(visitors_router)
    app.include_router(visits_router)
    app.include_router(admin_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "kiosk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.debug
    )
