"""
메뉴 투표 시스템 유틸리티 함수

주요 기능:
- 이름 정규화 (대소문자 무시 비교용)
- 타임스탬프 생성/파싱
"""
from datetime import datetime
from typing import Iterable, List, Optional

from config import TIMEZONE


def normalize_name(name: str) -> str:
    """
    이름 비교용 키 생성 (앞뒤 공백 제거 + 소문자)

    Args:
        name: 원본 이름

    Returns:
        비교용 정규화된 이름
    """
    return name.strip().lower()


def names_match(a: str, b: str) -> bool:
    """두 이름이 대소문자 무시하고 같은지 확인"""
    return normalize_name(a) == normalize_name(b)


def sort_names(names: Iterable[str]) -> List[str]:
    """이름 목록을 대소문자 무시하고 정렬"""
    return sorted(names, key=lambda n: (n.casefold(), n))


def now() -> datetime:
    """현재 시각 (설정된 시간대 기준)"""
    return datetime.now(TIMEZONE)


def parse_timestamp(value: Optional[str]) -> datetime:
    """
    ISO-8601 문자열을 datetime으로 변환

    Args:
        value: ISO 형식 문자열 ('Z' 접미사 허용)

    Returns:
        datetime (값이 없거나 잘못되면 현재 시각)
    """
    if not value:
        return now()
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return now()


def format_timestamp(value: datetime) -> str:
    """datetime을 ISO-8601 문자열로 변환"""
    return value.isoformat()
