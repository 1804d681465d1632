"""
메뉴 투표 시스템

주요 기능:
- 이벤트별 메뉴(시트 → 카테고리 → 메뉴) 관리
- 허용된 투표자의 카테고리별 쿼터 내 선택 투표
- 득표 집계 및 당선/동점 판정

공개 API:
- Event, Category, Vote: 데이터 모델
- validate_selections: 쿼터 검증
- VotingStore, MemoryStore, JsonFileStore: 저장소
- tally_votes, rank_category: 집계 및 순위
- VotingManager: 이벤트/투표 관리자
"""

from .models import Event, Category, Vote
from .validation import Violation, ValidationResult, validate_selections
from .store import VotingStore, MemoryStore, JsonFileStore
from .tally import Tally, RankedItem, CategoryResult, tally_votes, rank_category
from .manager import VotingManager
from .errors import (
    MenuVotingError,
    NotFound,
    Forbidden,
    InvalidRequest,
    Conflict,
    StorageError,
    ValidationFailed,
)

__all__ = [
    # 데이터 모델
    "Event",
    "Category",
    "Vote",

    # 검증
    "Violation",
    "ValidationResult",
    "validate_selections",

    # 저장소
    "VotingStore",
    "MemoryStore",
    "JsonFileStore",

    # 집계
    "Tally",
    "RankedItem",
    "CategoryResult",
    "tally_votes",
    "rank_category",

    # 관리자
    "VotingManager",

    # 예외
    "MenuVotingError",
    "NotFound",
    "Forbidden",
    "InvalidRequest",
    "Conflict",
    "StorageError",
    "ValidationFailed",
]
