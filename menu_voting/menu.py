"""
메뉴 데이터 정규화 (수동 입력용)

입력 형식: {시트명: [{"category": str, "quota": int | str, "items": [str, ...]}, ...]}
"""
import logging
import re
from typing import Any, List, Mapping

from .models import Category, MenuData
from .errors import InvalidRequest
from .constants import DEFAULT_QUOTA, MIN_QUOTA

logger = logging.getLogger(__name__)

_QUOTA_PATTERN = re.compile(r'-?\d+')


def extract_quota(value: Any) -> int:
    """
    쿼터 값 추출

    Args:
        value: 정수 또는 숫자가 포함된 문자열 (예: "2", "최대 2개", 부호 유지)

    Returns:
        쿼터 (값이 없거나 숫자가 없으면 기본값 1)
    """
    if value is None or value == "":
        return DEFAULT_QUOTA
    if isinstance(value, bool):
        return DEFAULT_QUOTA
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)

    match = _QUOTA_PATTERN.search(str(value))
    return int(match.group()) if match else DEFAULT_QUOTA


def _clean(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def parse_menu_data(raw: Any) -> MenuData:
    """
    수동 입력된 메뉴 데이터를 검증하고 Category 객체로 변환

    Args:
        raw: 원본 메뉴 dict

    Returns:
        {시트명: [Category, ...]}

    Raises:
        InvalidRequest: 형식 오류 (발견된 모든 문제를 details에 포함)
    """
    if not isinstance(raw, Mapping):
        raise InvalidRequest("메뉴 데이터 형식이 올바르지 않습니다.")

    problems: List[str] = []
    menu_data: MenuData = {}

    for sheet_name, raw_categories in raw.items():
        sheet = _clean(sheet_name)
        if not sheet:
            problems.append("시트 이름이 비어 있습니다.")
            continue
        if not isinstance(raw_categories, list):
            problems.append(f"[{sheet}] 카테고리 목록이 배열이 아닙니다.")
            continue

        categories: List[Category] = []
        for raw_category in raw_categories:
            if not isinstance(raw_category, Mapping):
                problems.append(f"[{sheet}] 카테고리 형식이 올바르지 않습니다.")
                continue

            name = _clean(raw_category.get("category"))
            if not name:
                problems.append(f"[{sheet}] 카테고리 이름이 비어 있습니다.")
                continue
            if any(c.name == name for c in categories):
                problems.append(f"[{sheet}] '{name}' 카테고리가 중복되었습니다.")
                continue

            quota = extract_quota(raw_category.get("quota"))
            if quota < MIN_QUOTA:
                problems.append(f"[{sheet}] '{name}' 카테고리의 쿼터는 {MIN_QUOTA} 이상이어야 합니다.")

            raw_items = raw_category.get("items")
            if raw_items is None:
                raw_items = []
            if not isinstance(raw_items, list):
                problems.append(f"[{sheet}] '{name}' 카테고리의 메뉴 목록이 배열이 아닙니다.")
                continue

            items: List[str] = []
            for raw_item in raw_items:
                item = _clean(raw_item)
                if not item:
                    problems.append(f"[{sheet}] '{name}' 카테고리에 빈 메뉴 이름이 있습니다.")
                elif item in items:
                    problems.append(f"[{sheet}] '{name}' 카테고리에 '{item}' 메뉴가 중복되었습니다.")
                else:
                    items.append(item)

            # 메뉴 없는 카테고리는 어떤 투표로도 채울 수 없음
            if not items:
                problems.append(f"[{sheet}] '{name}' 카테고리에 메뉴가 없습니다.")

            categories.append(Category(name=name, quota=quota, items=items))

        menu_data[sheet] = categories

    if problems:
        logger.warning(f"메뉴 데이터 검증 실패: {len(problems)}건")
        raise InvalidRequest("메뉴 데이터가 올바르지 않습니다.", details=problems)

    return menu_data
