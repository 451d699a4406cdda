"""
데이터베이스 연결 설정
SQLAlchemy를 사용한 데이터베이스 관리
"""
from typing import Optional
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# 모델 기본 클래스
Base = declarative_base()


class Database:
    """
    엔진과 세션 팩토리를 묶은 저장소 핸들
    - 애플리케이션 시작 시 생성하고 종료 시 dispose 합니다.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self.url = database_url

        # SQLite 여부에 따라 엔진 옵션 분기
        connect_args = {}
        engine_kwargs = {}
        if database_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if ":memory:" in database_url or database_url == "sqlite://":
                # 인메모리 DB는 커넥션 하나를 공유해야 테이블이 유지됨
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,   # 연결 검사
            connect_args=connect_args,
            **engine_kwargs,
        )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        """테이블 생성"""
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        """커넥션 풀 정리"""
        self.engine.dispose()


def get_database(request: Request) -> Database:
    """앱 상태에 등록된 Database 핸들"""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not initialised")
    return database


def get_db(request: Request):
    """데이터베이스 세션 의존성"""
    db = get_database(request).SessionLocal()
    try:
        yield db
    finally:
        db.close()
