"""
메뉴 투표 시스템 응답 데이터 생성 함수

주요 기능:
- 결과 응답 생성 (집계 + 카테고리별 순위)
- 투표자 선택 내역 응답 생성
"""
from typing import Any, Dict, List

from .models import Vote, Selections
from .tally import Tally, CategoryResult


def create_results_payload(
    sheet_votes: List[Vote],
    tally: Tally,
    category_results: List[CategoryResult]
) -> Dict[str, Any]:
    """
    결과 응답 생성

    Args:
        sheet_votes: 시트의 투표 목록
        tally: 시트 집계 결과
        category_results: 카테고리별 순위 결과

    Returns:
        {totalVotes, tally, votersByItem, votesList, categories}
    """
    return {
        "totalVotes": tally.total_votes,
        "tally": dict(tally.counts),
        "votersByItem": {item: list(voters) for item, voters in tally.voters_by_item.items()},
        "votesList": [vote.to_dict() for vote in sheet_votes],
        "categories": [result.to_dict() for result in category_results],
    }


def create_voter_votes_payload(votes_by_sheet: Dict[str, Selections]) -> Dict[str, Any]:
    """투표자의 시트별 선택 내역 응답 생성"""
    return {
        "success": True,
        "votes": {sheet: {cat: list(items) for cat, items in selections.items()}
                  for sheet, selections in votes_by_sheet.items()},
    }
