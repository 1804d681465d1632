"""
투표 집계 및 결과 순위

주요 기능:
- tally_votes: 저장된 투표를 메뉴별 득표수/투표자 목록으로 집계
- rank_category: 카테고리 쿼터 기준으로 당선/동점/탈락 분류
"""
import logging
from typing import Dict, Iterable, List
from dataclasses import dataclass, field

from .models import Category, Vote
from .constants import (
    CLASSIFICATION_WINNER,
    CLASSIFICATION_TIED,
    CLASSIFICATION_NONE,
    CLASSIFICATION_EMOJIS,
)

logger = logging.getLogger(__name__)


@dataclass
class Tally:
    """시트 단위 집계 결과"""
    # {메뉴명: 득표수} (득표가 없는 메뉴는 없음)
    counts: Dict[str, int] = field(default_factory=dict)

    # {메뉴명: [투표자 이름, ...]} (집계 순서 유지)
    voters_by_item: Dict[str, List[str]] = field(default_factory=dict)

    # 집계된 투표 수 (투표자 수)
    total_votes: int = 0

    def count(self, item: str) -> int:
        return self.counts.get(item, 0)

    def voters(self, item: str) -> List[str]:
        return list(self.voters_by_item.get(item, []))


@dataclass
class RankedItem:
    """순위가 매겨진 메뉴"""
    name: str
    count: int
    voters: List[str]
    classification: str = CLASSIFICATION_NONE

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "count": self.count,
            "voters": list(self.voters),
            "classification": self.classification,
        }


@dataclass
class CategoryResult:
    """카테고리 결과"""
    category: str
    quota: int
    threshold: int
    has_unresolved_tie: bool
    items: List[RankedItem] = field(default_factory=list)

    @property
    def winners(self) -> List[str]:
        return [i.name for i in self.items if i.classification == CLASSIFICATION_WINNER]

    @property
    def tied(self) -> List[str]:
        return [i.name for i in self.items if i.classification == CLASSIFICATION_TIED]

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "quota": self.quota,
            "threshold": self.threshold,
            "hasUnresolvedTie": self.has_unresolved_tie,
            "items": [item.to_dict() for item in self.items],
        }


def tally_votes(votes: Iterable[Vote]) -> Tally:
    """
    투표 집계

    검증은 하지 않는다. 저장된 내용을 그대로 센다.

    Args:
        votes: 한 시트의 투표 목록 (저장 순서)

    Returns:
        Tally
    """
    tally = Tally()

    for vote in votes:
        tally.total_votes += 1
        for items in vote.selections.values():
            for item in items:
                tally.counts[item] = tally.counts.get(item, 0) + 1
                tally.voters_by_item.setdefault(item, []).append(vote.voter_name)

    return tally


def rank_category(category: Category, tally: Tally) -> CategoryResult:
    """
    카테고리 결과 순위 및 분류

    1. 득표수 내림차순 정렬 (동점은 원래 메뉴 순서 유지)
    2. 기준 득표수 = min(쿼터, 메뉴 수) 번째 메뉴의 득표수
    3. 기준 초과 메뉴 수 + 기준 동점 메뉴 수(득표 > 0)가 쿼터를 넘으면 미해결 동점
    4. 득표 > 0 이고 기준 이상이면 당선, 단 미해결 동점이면 기준 동점 메뉴는 'tied'

    Args:
        category: 카테고리 (이름, 쿼터, 메뉴 목록)
        tally: 시트 집계 결과

    Returns:
        CategoryResult
    """
    # sorted()는 안정 정렬이므로 동점 메뉴는 원래 순서를 유지
    ranked = sorted(
        (RankedItem(name=item, count=tally.count(item), voters=tally.voters(item))
         for item in category.items),
        key=lambda r: r.count,
        reverse=True
    )

    threshold = 0
    if ranked:
        threshold = ranked[min(category.quota, len(ranked)) - 1].count

    above = sum(1 for r in ranked if r.count > threshold)
    at_threshold = sum(1 for r in ranked if r.count == threshold and r.count > 0)
    has_unresolved_tie = (above + at_threshold) > category.quota

    for r in ranked:
        if r.count > 0 and r.count >= threshold:
            if r.count == threshold and has_unresolved_tie:
                r.classification = CLASSIFICATION_TIED
            else:
                r.classification = CLASSIFICATION_WINNER
        else:
            r.classification = CLASSIFICATION_NONE

    return CategoryResult(
        category=category.name,
        quota=category.quota,
        threshold=threshold,
        has_unresolved_tie=has_unresolved_tie,
        items=ranked,
    )


def rank_sheet(categories: Iterable[Category], tally: Tally) -> List[CategoryResult]:
    """시트의 모든 카테고리 순위 계산"""
    return [rank_category(category, tally) for category in categories]


def log_category_results(title: str, results: List[CategoryResult]) -> None:
    """
    카테고리 결과 로깅 (디버그)

    Args:
        title: 로그 제목 (이벤트/시트)
        results: 카테고리 결과 목록
    """
    logger.debug(f"=== 결과: {title} ===")
    for result in results:
        tie_note = " (동점 해결 필요)" if result.has_unresolved_tie else ""
        logger.debug(f"[{result.category}] 쿼터 {result.quota}, 기준 {result.threshold}표{tie_note}")
        for idx, item in enumerate(result.items, 1):
            emoji = CLASSIFICATION_EMOJIS[item.classification]
            logger.debug(f"  {emoji} {idx}. {item.name} - {item.count}표")
