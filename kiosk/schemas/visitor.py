"""
방문자 검색 관련 Pydantic 스키마 (API 응답)
"""
from pydantic import BaseModel


class VisitorSuggestion(BaseModel):
    """자동완성용 방문자 (이름, 이메일)"""
    full_name: str
    email: str
