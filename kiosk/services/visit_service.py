"""
방문 기록 서비스
비즈니스 로직 계층 (사진 업로드, 사유 자동 승격, 방문 저장)
"""
import logging
import time
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from kiosk.config import settings
from kiosk.models.visit import Visit, VisitSource
from kiosk.models.visit_reason import VisitReason
from kiosk.schemas.visit import VisitCreate, AdminVisitResponse
from kiosk.services.crm import CrmVisitPayload
from kiosk.services.reason_service import ReasonService, slugify
from kiosk.storage.photos import PhotoStorage
from kiosk.utils.exceptions import BadRequestException, ServerErrorException
from kiosk.utils.text import fold_key

logger = logging.getLogger(__name__)

RECENT_VISITS_LIMIT = 50


class VisitService:
    """방문 기록 서비스"""

    @staticmethod
    def count_custom_reason_matches(db: Session, text: str) -> int:
        """직접 입력 사유가 같은 이전 방문 수 (대소문자 무시)"""
        return (
            db.query(func.count(Visit.id))
            .filter(Visit.custom_reason_key == fold_key(text))
            .scalar()
        )

    @staticmethod
    def promote_custom_reason(db: Session, text: str) -> Optional[VisitReason]:
        """
        직접 입력 사유 자동 승격
        - 같은 사유가 이미 2번 이상 입력됐다면(이번이 3번째 이상) slug 기준으로 사유를 upsert 합니다.
        - 실패해도 예외를 던지지 않고 None을 반환합니다. 방문 등록은 계속 진행됩니다.
        """
        try:
            prior = VisitService.count_custom_reason_matches(db, text)
            if prior < settings.promotion_threshold:
                return None

            slug = slugify(text)
            if not slug:
                return None

            reason = ReasonService.upsert_reason_by_slug(db, slug, text)
            logger.info(f"Promoted custom reason to visit reason: slug={slug} reason_id={reason.id} prior={prior}")
            return reason
        except Exception:
            logger.exception(f"Custom reason promotion failed; keeping free text: {text!r}")
            # 방문 행은 아직 추가 전이므로 되돌려도 잃는 것이 없음
            db.rollback()
            return None

    @staticmethod
    def _upload_photo(storage: PhotoStorage, data_url: str) -> Tuple[Optional[str], Optional[str]]:
        """사진 업로드 후 (키, 서명 URL). 실패하면 사진 없이 진행"""
        photo_key = None
        photo_url = None
        try:
            photo_key = storage.upload_visitor_photo(data_url)
            logger.info(f"Photo uploaded successfully: {photo_key}")
        except Exception as e:
            logger.error(f"Photo upload failed: {e}")
            return None, None

        try:
            photo_url = storage.generate_presigned_url(photo_key)
        except Exception as e:
            logger.error(f"Presigned URL generation failed for {photo_key}: {e}")
        return photo_key, photo_url

    @staticmethod
    def record_visit(db: Session, storage: PhotoStorage, visit_data: VisitCreate) -> Tuple[Visit, Optional[str]]:
        """
        방문 등록
        - 사진, 사유 승격 실패는 로그만 남기고 방문은 항상 저장합니다.
        - 반환값: (저장된 방문, 즉시 표시용 사진 URL)
        """
        start = time.monotonic()
        logger.info(f"Visit submission started: email={visit_data.email} has_photo={bool(visit_data.photo_data_url)}")

        if visit_data.visit_reason_id is not None:
            exists = db.query(VisitReason.id).filter(VisitReason.id == visit_data.visit_reason_id).first()
            if not exists:
                raise BadRequestException(detail=f"Visit reason with ID {visit_data.visit_reason_id} not found")

        photo_key, photo_url = None, None
        if visit_data.photo_data_url:
            photo_key, photo_url = VisitService._upload_photo(storage, visit_data.photo_data_url)

        visit_reason_id = visit_data.visit_reason_id
        custom_reason = visit_data.custom_reason
        if custom_reason and visit_reason_id is None:
            promoted = VisitService.promote_custom_reason(db, custom_reason)
            if promoted is not None:
                visit_reason_id = promoted.id
                custom_reason = None

        visit = Visit(
            full_name=visit_data.full_name,
            email=visit_data.email,
            source=VisitSource(visit_data.source.value),
            photo_key=photo_key,
            visit_reason_id=visit_reason_id,
            custom_reason=custom_reason,
        )
        try:
            db.add(visit)
            db.commit()
            db.refresh(visit)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to create visit ({(time.monotonic() - start) * 1000:.0f}ms)")
            raise ServerErrorException(detail="Failed to create visit")

        logger.info(
            f"Visit created successfully: id={visit.id} reason_id={visit.visit_reason_id} "
            f"has_photo={bool(photo_key)} duration={(time.monotonic() - start) * 1000:.0f}ms"
        )
        return visit, photo_url

    @staticmethod
    def build_crm_payload(visit: Visit) -> CrmVisitPayload:
        """CRM 전달용 페이로드"""
        return CrmVisitPayload(
            id=visit.id,
            full_name=visit.full_name,
            email=visit.email,
            visit_reason_label=visit.reason_label,
            source=visit.source.value,
            created_at=visit.created_at,
        )

    @staticmethod
    def list_recent_visits(
            db: Session,
            storage: PhotoStorage,
            limit: int = RECENT_VISITS_LIMIT
    ) -> List[AdminVisitResponse]:
        """최근 방문 목록 (사진은 조회 시점에 서명 URL 발급)"""
        visits = (
            db.query(Visit)
            .options(joinedload(Visit.visit_reason))
            .order_by(Visit.created_at.desc(), Visit.id.desc())
            .limit(limit)
            .all()
        )

        items = []
        for v in visits:
            photo_url = None
            if v.photo_key:
                try:
                    photo_url = storage.generate_presigned_url(v.photo_key)
                except Exception as e:
                    logger.error(f"Failed to generate presigned URL for visit {v.id}: {e}")

            items.append(AdminVisitResponse(
                id=v.id,
                full_name=v.full_name,
                email=v.email,
                visit_reason_label=v.reason_label,
                source=v.source,
                created_at=v.created_at,
                photo_url=photo_url,
            ))
        return items
