"""
방문 기록 모델 (데이터베이스 테이블)
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship, validates
import enum
from kiosk.database import Base
from kiosk.utils.clock import utcnow
from kiosk.utils.text import fold_key


class VisitSource(str, enum.Enum):
    """방문 등록 경로"""
    KIOSK = "KIOSK"  # 키오스크
    MANUAL = "MANUAL"  # 수기 등록
    API = "API"  # 외부 API


class Visit(Base):
    """방문 기록 테이블 (생성 후 수정하지 않음)"""
    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False, index=True)
    full_name_key = Column(String(400), nullable=False, index=True)  # 검색용 casefold 값
    email = Column(String(200), nullable=False, index=True)
    source = Column(SQLEnum(VisitSource), default=VisitSource.KIOSK, nullable=False)
    photo_key = Column(String(500), nullable=True)  # URL이 아니라 저장소 키
    visit_reason_id = Column(Integer, ForeignKey("visit_reasons.id"), nullable=True, index=True)
    custom_reason = Column(String(200), nullable=True)
    custom_reason_key = Column(String(400), nullable=True, index=True)  # 승격 판정용 casefold 값
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    # 관계
    visit_reason = relationship("VisitReason", back_populates="visits")
    crm_sync_events = relationship("CrmSyncEvent", back_populates="visit")

    @validates("full_name")
    def _set_full_name_key(self, key, value):
        self.full_name_key = fold_key(value)
        return value

    @validates("custom_reason")
    def _set_custom_reason_key(self, key, value):
        self.custom_reason_key = fold_key(value)
        return value

    @property
    def reason_label(self):
        """연결된 사유 라벨, 없으면 직접 입력한 사유"""
        if self.visit_reason is not None:
            return self.visit_reason.label
        return self.custom_reason

    def __repr__(self):
        return f"<Visit(id={self.id}, full_name={self.full_name}, reason_id={self.visit_reason_id})>"
