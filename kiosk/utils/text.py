"""
문자열 정규화 유틸리티
대소문자 무시 비교는 DB 함수(lower) 대신 여기서 만든 키로 수행
"""
import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """앞뒤 공백 제거 및 연속 공백을 하나로 축약"""
    return _WHITESPACE_RE.sub(" ", value).strip()


def fold_key(value):
    """비교용 키 (공백 정규화 + casefold, 비ASCII 문자 포함)"""
    if value is None:
        return None
    return normalize_text(value).casefold()
