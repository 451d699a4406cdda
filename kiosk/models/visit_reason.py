"""
방문 사유 모델 (데이터베이스 테이블)
"""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
from kiosk.database import Base
from kiosk.utils.clock import utcnow


class ReasonSource(str, enum.Enum):
    """사유 출처"""
    MANUAL = "MANUAL"  # 관리자 생성 또는 자동 승격
    LUMA = "LUMA"  # 외부 이벤트 연동


class ReasonCategory(str, enum.Enum):
    """사유 분류"""
    EVENT = "EVENT"  # 이벤트 참석
    GENERAL = "GENERAL"  # 기타


class VisitReason(Base):
    """방문 사유 테이블"""
    __tablename__ = "visit_reasons"

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, index=True, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    source = Column(SQLEnum(ReasonSource), default=ReasonSource.MANUAL, nullable=False)
    category = Column(SQLEnum(ReasonCategory), nullable=True, index=True)
    featured = Column(Boolean, default=False, nullable=False)
    featured_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # 관계
    visits = relationship("Visit", back_populates="visit_reason")

    def __repr__(self):
        return f"<VisitReason(id={self.id}, slug={self.slug}, active={self.active})>"
