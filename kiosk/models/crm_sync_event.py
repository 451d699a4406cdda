"""
CRM 동기화 기록 모델 (데이터베이스 테이블)
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum
from kiosk.database import Base
from kiosk.utils.clock import utcnow


class CrmProvider(str, enum.Enum):
    """CRM 제공자"""
    NONE = "NONE"
    WEBHOOK = "WEBHOOK"


class CrmSyncStatus(str, enum.Enum):
    """동기화 결과"""
    SKIPPED = "SKIPPED"
    SENT = "SENT"
    FAILED = "FAILED"


class CrmSyncEvent(Base):
    """CRM 동기화 기록 테이블"""
    __tablename__ = "crm_sync_events"

    id = Column(Integer, primary_key=True, index=True)
    visit_id = Column(Integer, ForeignKey("visits.id", ondelete="CASCADE"), nullable=False, index=True)
    provider = Column(SQLEnum(CrmProvider), nullable=False)
    status = Column(SQLEnum(CrmSyncStatus), nullable=False)
    error = Column(String(500), nullable=True)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # 관계
    visit = relationship("Visit", back_populates="crm_sync_events")

    def __repr__(self):
        return f"<CrmSyncEvent(id={self.id}, visit_id={self.visit_id}, status={self.status})>"
