"""
기본 방문 사유 시드 스크립트
python -m kiosk.seed
"""
import logging
import sys
from sqlalchemy.orm import Session
from kiosk.config import settings
from kiosk.database import Database
from kiosk.logging_config import configure_logging
from kiosk.models.visit_reason import VisitReason, ReasonSource
from kiosk.services.reason_service import slugify
from kiosk.models import visit, crm_sync_event  # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_VISIT_REASONS = [
    ("Meeting someone", 1),
    ("Coworking", 2),
    ("Attending an event", 3),
    ("Touring the space", 4),
    ("Delivery", 5),
    ("Interview", 6),
    ("Other", 7),
]


def seed_visit_reasons(db: Session) -> int:
    """기본 사유 생성 또는 갱신 (여러 번 실행해도 결과 동일)"""
    for label, sort_order in DEFAULT_VISIT_REASONS:
        slug = slugify(label)
        reason = db.query(VisitReason).filter(VisitReason.slug == slug).first()
        if reason is None:
            reason = VisitReason(slug=slug)
            db.add(reason)
        reason.label = label
        reason.active = True
        reason.sort_order = sort_order
        reason.source = ReasonSource.MANUAL
        logger.info(f"Created/updated visit reason: {label}")
    db.commit()
    return len(DEFAULT_VISIT_REASONS)


def main() -> int:
    configure_logging(settings.log_level)
    database = Database(settings.database_url)
    database.create_all()
    db = database.SessionLocal()
    try:
        seed_visit_reasons(db)
        logger.info("Database seed completed successfully")
        return 0
    except Exception:
        db.rollback()
        logger.exception("Seed failed")
        return 1
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    sys.exit(main())
