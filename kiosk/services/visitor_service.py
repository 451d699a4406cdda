"""
방문자 검색 서비스
이름 자동완성을 위한 과거 방문자 조회
"""
import logging
from typing import List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from kiosk.models.visit import Visit
from kiosk.schemas.visitor import VisitorSuggestion
from kiosk.utils.text import fold_key

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3
MAX_RESULTS = 10


class VisitorService:
    """방문자 검색 서비스"""

    @staticmethod
    def search_visitors(db: Session, keyword: str) -> List[VisitorSuggestion]:
        """
        이름 부분 일치 검색
        - 3글자 미만이면 DB 조회 없이 빈 목록을 반환합니다.
        - (이름, 이메일) 조합을 대소문자 구분 없이 중복 제거하고 최근 방문 순으로 최대 10건 반환합니다.
        - 조회 실패 시 빈 목록으로 대체합니다.
        """
        keyword = (keyword or "").strip()
        if len(keyword) < MIN_QUERY_LENGTH:
            return []

        try:
            query = (
                db.query(Visit.full_name, Visit.email)
                .filter(Visit.full_name_key.like(f"%{fold_key(keyword)}%"))
                .order_by(Visit.created_at.desc(), Visit.id.desc())
            )

            results: List[VisitorSuggestion] = []
            seen = set()
            for full_name, email in query.yield_per(100):
                pair = (fold_key(full_name), email.casefold())
                if pair in seen:
                    continue
                seen.add(pair)
                results.append(VisitorSuggestion(full_name=full_name, email=email))
                if len(results) >= MAX_RESULTS:
                    break
            return results
        except SQLAlchemyError:
            logger.exception("Visitor search failed")
            db.rollback()
            return []
