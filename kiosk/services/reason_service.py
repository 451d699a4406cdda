"""
방문 사유 관리 서비스
비즈니스 로직 계층 (추천 사유 개수 제한, slug 기준 upsert)
"""
import logging
import re
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from kiosk.config import settings
from kiosk.models.visit_reason import VisitReason, ReasonSource, ReasonCategory
from kiosk.schemas.visit_reason import (
    VisitReasonCreate,
    VisitReasonUpdate,
    VisitReasonResponse,
    PublicVisitReasonResponse,
)
from kiosk.utils.clock import utcnow
from kiosk.utils.exceptions import NotFoundException, DuplicateException, BadRequestException

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """소문자화 후 영숫자가 아닌 구간을 하이픈 하나로 치환"""
    return _NON_ALNUM_RE.sub("-", text.lower()).strip("-")


def normalize_slug(slug: str) -> str:
    """관리자가 직접 입력한 slug 정리"""
    return _WHITESPACE_RE.sub("-", slug.strip().lower())


def featured_cutoff(now: datetime) -> datetime:
    return now - timedelta(hours=settings.featured_ttl_hours)


def is_effectively_featured(reason: VisitReason, now: Optional[datetime] = None) -> bool:
    """저장된 featured 값이 참이고 48시간 이내에 지정된 경우에만 추천 상태"""
    if not reason.featured or reason.featured_at is None:
        return False
    now = now or utcnow()
    return now - reason.featured_at < timedelta(hours=settings.featured_ttl_hours)


class ReasonService:
    """방문 사유 관리 서비스"""

    @staticmethod
    def _ordered(query):
        return query.order_by(VisitReason.sort_order.asc(), VisitReason.label.asc(), VisitReason.id.asc())

    @staticmethod
    def list_active_reasons(
            db: Session,
            category: Optional[ReasonCategory] = None
    ) -> List[PublicVisitReasonResponse]:
        """키오스크용 활성 사유 목록 (추천 여부는 조회 시점에 계산)"""
        query = db.query(VisitReason).filter(VisitReason.active.is_(True))
        if category is not None:
            query = query.filter(VisitReason.category == category)
        reasons = ReasonService._ordered(query).all()

        now = utcnow()
        return [
            PublicVisitReasonResponse(
                id=r.id,
                label=r.label,
                slug=r.slug,
                featured=is_effectively_featured(r, now),
                category=r.category,
            )
            for r in reasons
        ]

    @staticmethod
    def to_admin_response(reason: VisitReason, now: Optional[datetime] = None) -> VisitReasonResponse:
        response = VisitReasonResponse.model_validate(reason)
        response.featured_active = is_effectively_featured(reason, now)
        return response

    @staticmethod
    def list_all_reasons(db: Session) -> List[VisitReasonResponse]:
        """관리자용 전체 사유 목록"""
        reasons = ReasonService._ordered(db.query(VisitReason)).all()
        now = utcnow()
        return [ReasonService.to_admin_response(r, now) for r in reasons]

    @staticmethod
    def get_reason_by_id(db: Session, reason_id: int) -> VisitReason:
        """ID로 사유 조회"""
        reason = db.query(VisitReason).filter(VisitReason.id == reason_id).first()
        if not reason:
            raise NotFoundException(detail=f"Visit reason with ID {reason_id} not found")
        return reason

    @staticmethod
    def get_reason_by_slug(db: Session, slug: str) -> Optional[VisitReason]:
        return db.query(VisitReason).filter(VisitReason.slug == slug).first()

    @staticmethod
    def create_reason(db: Session, reason_data: VisitReasonCreate) -> VisitReason:
        """사유 생성"""
        if reason_data.slug and reason_data.slug.strip():
            slug = normalize_slug(reason_data.slug)
        else:
            slug = slugify(reason_data.label)
        if not slug:
            raise BadRequestException(detail="Could not derive a slug from the label")

        if ReasonService.get_reason_by_slug(db, slug):
            raise DuplicateException(detail=f"Visit reason with slug '{slug}' already exists")

        reason = VisitReason(
            label=reason_data.label,
            slug=slug,
            active=reason_data.active,
            sort_order=reason_data.sort_order,
            source=ReasonSource(reason_data.source.value),
            category=ReasonCategory(reason_data.category.value) if reason_data.category else None,
        )
        db.add(reason)
        try:
            db.commit()
        except IntegrityError:
            # 동시에 같은 slug가 생성된 경우
            db.rollback()
            raise DuplicateException(detail=f"Visit reason with slug '{slug}' already exists")
        db.refresh(reason)
        return reason

    @staticmethod
    def update_reason(db: Session, reason_id: int, reason_data: VisitReasonUpdate) -> VisitReason:
        """
        사유 정보 수정
        - featured=true 요청은 다른 추천 사유가 이미 최대치면 거부되고 아무 값도 바뀌지 않습니다.
        - featured=false는 항상 성공하며 featured_at을 비웁니다.
        """
        reason = ReasonService.get_reason_by_id(db, reason_id)

        update_data = reason_data.model_dump(exclude_unset=True)
        featured = update_data.pop("featured", None)
        # null을 허용하지 않는 필드는 명시적 null을 무시
        for field in ("label", "active", "sort_order"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)
        if "category" in update_data and update_data["category"] is not None:
            update_data["category"] = ReasonCategory(update_data["category"].value)

        if featured is True:
            now = utcnow()
            if not ReasonService._feature_if_below_cap(db, reason.id, now, update_data):
                db.rollback()
                raise BadRequestException(
                    detail=f"Cannot feature more than {settings.max_featured_reasons} reasons at a time."
                )
            db.commit()
            db.refresh(reason)
            return reason

        if featured is False:
            update_data["featured"] = False
            update_data["featured_at"] = None

        for field, value in update_data.items():
            setattr(reason, field, value)

        db.commit()
        db.refresh(reason)
        return reason

    @staticmethod
    def _feature_if_below_cap(db: Session, reason_id: int, now: datetime, extra_values: dict) -> bool:
        """개수 확인과 갱신을 하나의 조건부 UPDATE로 처리"""
        other = aliased(VisitReason)
        featured_count = (
            select(func.count(other.id))
            .where(
                other.featured.is_(True),
                other.featured_at >= featured_cutoff(now),
                other.id != reason_id,
            )
            .scalar_subquery()
        )
        stmt = (
            update(VisitReason)
            .where(VisitReason.id == reason_id, featured_count < settings.max_featured_reasons)
            .values(featured=True, featured_at=now, updated_at=now, **extra_values)
            .execution_options(synchronize_session=False)
        )
        result = db.execute(stmt)
        return result.rowcount == 1

    @staticmethod
    def upsert_reason_by_slug(db: Session, slug: str, label: str) -> VisitReason:
        """
        slug 기준 upsert
        - 이미 있으면 기존 행을 그대로 반환하고, 없으면 새로 생성합니다.
        - 동시 승격으로 인한 충돌은 ON CONFLICT DO NOTHING으로 흡수됩니다.
        """
        now = utcnow()
        values = dict(
            label=label,
            slug=slug,
            active=True,
            sort_order=0,
            source=ReasonSource.MANUAL,
            featured=False,
            created_at=now,
            updated_at=now,
        )

        dialect = db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(VisitReason).values(**values).on_conflict_do_nothing(index_elements=["slug"])
            db.execute(stmt)
        elif dialect == "sqlite":
            stmt = sqlite.insert(VisitReason).values(**values).on_conflict_do_nothing(index_elements=["slug"])
            db.execute(stmt)
        elif ReasonService.get_reason_by_slug(db, slug) is None:
            # 그 외 DB는 조회 후 삽입 (충돌 시 IntegrityError가 호출자에게 전달됨)
            db.add(VisitReason(**values))
            db.flush()

        reason = ReasonService.get_reason_by_slug(db, slug)
        if reason is None:
            raise RuntimeError(f"Visit reason upsert for slug '{slug}' returned no row")
        return reason
