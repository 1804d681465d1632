"""
투표 선택 검증 (카테고리 쿼터 확인)

주요 기능:
- 시트의 모든 카테고리가 선택되었는지 확인
- 카테고리별 선택 개수가 1 ~ 쿼터 범위인지 확인
- 선택한 메뉴가 카테고리에 존재하는지 확인

검증은 부작용이 없는 순수 함수이며, 첫 번째 위반에서 멈추지 않고
모든 위반을 모아서 반환한다.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence
from dataclasses import dataclass, field

from .models import Category, Selections
from .constants import (
    VIOLATION_INCOMPLETE,
    VIOLATION_QUOTA,
    VIOLATION_UNKNOWN_ITEM,
    VIOLATION_UNKNOWN_CATEGORY,
)


@dataclass
class Violation:
    """카테고리 하나에 대한 검증 위반"""
    kind: str
    category: str
    message: str
    items: List[str] = field(default_factory=list)
    selected: Optional[int] = None
    quota: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "kind": self.kind,
            "category": self.category,
            "message": self.message,
        }
        if self.items:
            payload["items"] = list(self.items)
        if self.selected is not None:
            payload["selected"] = self.selected
        if self.quota is not None:
            payload["quota"] = self.quota
        return payload


@dataclass
class ValidationResult:
    """검증 결과 (정규화된 선택 또는 위반 목록)"""
    selections: Selections = field(default_factory=dict)
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def categories(self, kind: str) -> List[str]:
        """특정 종류의 위반이 발생한 카테고리 이름 목록"""
        return [v.category for v in self.violations if v.kind == kind]


def _dedupe(items: Sequence[str]) -> List[str]:
    """순서를 유지하며 중복 제거"""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def validate_selections(
    categories: Sequence[Category],
    selections: Mapping[str, Sequence[str]]
) -> ValidationResult:
    """
    투표자의 선택을 시트 카테고리 쿼터에 맞춰 검증

    Args:
        categories: 시트의 카테고리 목록
        selections: {카테고리명: [선택한 메뉴명, ...]}

    Returns:
        ValidationResult
        - 성공: 시트 카테고리 순서로 정렬된 선택 (중복 메뉴 제거)
        - 실패: 발견된 모든 위반
    """
    violations: List[Violation] = []
    normalized: Selections = {}
    known = {category.name for category in categories}

    for category in categories:
        if category.name not in selections:
            violations.append(Violation(
                kind=VIOLATION_INCOMPLETE,
                category=category.name,
                message=f"'{category.name}' 카테고리를 선택하지 않았습니다.",
            ))
            continue

        chosen = _dedupe(selections[category.name])

        if not 1 <= len(chosen) <= category.quota:
            violations.append(Violation(
                kind=VIOLATION_QUOTA,
                category=category.name,
                message=f"'{category.name}' 카테고리는 1개 이상 {category.quota}개 이하로 선택해야 합니다.",
                selected=len(chosen),
                quota=category.quota,
            ))

        unknown = [item for item in chosen if not category.has_item(item)]
        if unknown:
            violations.append(Violation(
                kind=VIOLATION_UNKNOWN_ITEM,
                category=category.name,
                message=f"'{category.name}' 카테고리에 없는 메뉴입니다: {', '.join(unknown)}",
                items=unknown,
            ))

        normalized[category.name] = chosen

    # 시트에 없는 카테고리는 집계를 오염시키므로 거부
    for name in selections:
        if name not in known:
            violations.append(Violation(
                kind=VIOLATION_UNKNOWN_CATEGORY,
                category=name,
                message=f"'{name}' 카테고리는 이 시트에 없습니다.",
            ))

    if violations:
        return ValidationResult(violations=violations)
    return ValidationResult(selections=normalized)
