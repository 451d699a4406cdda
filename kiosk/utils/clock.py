"""
시간 유틸리티
DB에는 타임존 없는 UTC 시각을 저장
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """현재 UTC 시각 (naive)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
