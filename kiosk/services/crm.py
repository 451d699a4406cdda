"""
CRM 연동 서비스
방문 기록을 외부 CRM으로 전달 (전송 보장 없음, 실패는 로그만 남김)
"""
import logging
from datetime import datetime
from typing import Callable, Optional

import requests
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kiosk.config import Settings
from kiosk.models.crm_sync_event import CrmSyncEvent, CrmProvider, CrmSyncStatus
from kiosk.utils.clock import utcnow

logger = logging.getLogger(__name__)


class CrmVisitPayload(BaseModel):
    """CRM으로 보내는 방문 정보"""
    id: int
    full_name: str
    email: str
    visit_reason_label: Optional[str]
    source: str
    created_at: datetime


class CrmClient:
    """CRM 클라이언트 기본 클래스"""
    provider = CrmProvider.NONE

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def send_visit(self, payload: CrmVisitPayload) -> None:
        raise NotImplementedError

    def _record(self, visit_id: int, status: CrmSyncStatus, error: Optional[str] = None,
                sent_at: Optional[datetime] = None) -> None:
        """동기화 결과 기록 (요청 세션과 별도의 세션 사용)"""
        db = self.session_factory()
        try:
            db.add(CrmSyncEvent(
                visit_id=visit_id,
                provider=self.provider,
                status=status,
                error=error[:500] if error else None,
                sent_at=sent_at,
            ))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class NoopCrmClient(CrmClient):
    """실제 CRM 없이 '건너뜀'으로만 기록"""
    provider = CrmProvider.NONE

    def send_visit(self, payload: CrmVisitPayload) -> None:
        self._record(payload.id, CrmSyncStatus.SKIPPED)


class WebhookCrmClient(CrmClient):
    """설정된 URL로 방문 정보를 POST"""
    provider = CrmProvider.WEBHOOK

    def __init__(self, session_factory: Callable[[], Session], url: str, timeout: float = 5.0,
                 http: Optional[requests.Session] = None):
        super().__init__(session_factory)
        self.url = url
        self.timeout = timeout
        self.http = http or requests.Session()

    def send_visit(self, payload: CrmVisitPayload) -> None:
        try:
            response = self.http.post(self.url, json=payload.model_dump(mode="json"), timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            self._record(payload.id, CrmSyncStatus.FAILED, error=str(e))
            raise
        self._record(payload.id, CrmSyncStatus.SENT, sent_at=utcnow())


def get_crm_client(settings: Settings, session_factory: Callable[[], Session]) -> CrmClient:
    """설정(CRM_PROVIDER)에 맞는 클라이언트 생성"""
    provider = (settings.crm_provider or "NONE").upper()

    if provider == CrmProvider.WEBHOOK.value:
        if not settings.crm_webhook_url:
            logger.warning("CRM_PROVIDER=WEBHOOK but CRM_WEBHOOK_URL is empty; falling back to no-op client")
            return NoopCrmClient(session_factory)
        return WebhookCrmClient(session_factory, settings.crm_webhook_url, settings.crm_timeout_seconds)

    if provider != CrmProvider.NONE.value:
        logger.warning(f"Unknown CRM provider {provider!r}; using no-op client")
    return NoopCrmClient(session_factory)


def dispatch_visit(client: CrmClient, payload: CrmVisitPayload) -> None:
    """백그라운드 작업용 전송 (한 번만 시도, 실패는 로그 후 폐기)"""
    try:
        client.send_visit(payload)
    except Exception:
        logger.exception(f"CRM sync failed for visit {payload.id}")
