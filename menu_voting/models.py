"""
메뉴 투표 시스템 데이터 모델

주요 클래스:
- Category: 시트 안의 선택 카테고리 (쿼터 + 메뉴 목록)
- Event: 투표 이벤트 (메뉴, 허용 투표자, 상태)
- Vote: 투표자 1명의 시트별 선택 내역
"""
import logging
import uuid
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime

from .constants import STATUS_OPEN, DEFAULT_CREATOR_NAME, DEFAULT_QUOTA
from .utils import normalize_name, names_match, sort_names, now, parse_timestamp, format_timestamp

logger = logging.getLogger(__name__)

# {시트명: [Category, ...]}
MenuData = Dict[str, List["Category"]]

# {카테고리명: [메뉴명, ...]}
Selections = Dict[str, List[str]]


@dataclass
class Category:
    """시트 안의 카테고리"""
    name: str
    quota: int = DEFAULT_QUOTA
    items: List[str] = field(default_factory=list)

    def has_item(self, item: str) -> bool:
        return item in self.items

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.name, "quota": self.quota, "items": list(self.items)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            name=data["category"],
            quota=int(data.get("quota") or DEFAULT_QUOTA),
            items=list(data.get("items") or []),
        )


@dataclass
class Event:
    """투표 이벤트 데이터"""
    topic: str
    creator_name: str = DEFAULT_CREATOR_NAME
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=now)

    # 부가 정보 (자유 입력)
    date: str = ""
    time: str = ""
    location: str = ""

    # 메뉴 {시트명: [Category, ...]}
    menu_data: MenuData = field(default_factory=dict)

    # 투표 진행 상태 ('open' | 'closed')
    status: str = STATUS_OPEN

    # 허용된 투표자 이름 (대소문자 무시 중복 불가)
    allowed_voters: List[str] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.status == STATUS_OPEN

    def get_sheet(self, sheet_name: str) -> Optional[List[Category]]:
        """
        시트의 카테고리 목록 가져오기

        Args:
            sheet_name: 시트 이름

        Returns:
            카테고리 목록 (시트가 없으면 None)
        """
        return self.menu_data.get(sheet_name)

    def is_voter_allowed(self, name: str) -> bool:
        """허용 목록에 이름이 있는지 확인 (대소문자 무시)"""
        return any(names_match(voter, name) for voter in self.allowed_voters)

    def add_voter(self, name: str) -> bool:
        """
        허용 투표자 추가

        Args:
            name: 투표자 이름

        Returns:
            성공 여부 (이미 있으면 False)
        """
        name = name.strip()
        if self.is_voter_allowed(name):
            return False
        self.allowed_voters = sort_names(self.allowed_voters + [name])
        return True

    def remove_voter(self, name: str) -> bool:
        """
        허용 투표자 삭제

        Args:
            name: 투표자 이름 (대소문자 무시)

        Returns:
            성공 여부 (목록에 없으면 False)
        """
        remaining = [voter for voter in self.allowed_voters if not names_match(voter, name)]
        if len(remaining) == len(self.allowed_voters):
            return False
        self.allowed_voters = remaining
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "topic": self.topic,
            "creatorName": self.creator_name,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "menuData": {
                sheet: [category.to_dict() for category in categories]
                for sheet, categories in self.menu_data.items()
            },
            "status": self.status,
            "allowedVoters": list(self.allowed_voters),
            "createdAt": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """
        저장된 dict에서 이벤트 복원

        Note:
            예전 형식 데이터에 status/allowedVoters/creatorName이 없으면 기본값을 채운다.
        """
        menu_data = {
            sheet: [Category.from_dict(c) for c in categories]
            for sheet, categories in (data.get("menuData") or {}).items()
        }
        return cls(
            id=data["id"],
            topic=data.get("topic", ""),
            creator_name=data.get("creatorName") or DEFAULT_CREATOR_NAME,
            created_at=parse_timestamp(data.get("createdAt")),
            date=data.get("date", ""),
            time=data.get("time", ""),
            location=data.get("location", ""),
            menu_data=menu_data,
            status=data.get("status") or STATUS_OPEN,
            allowed_voters=list(data.get("allowedVoters") or []),
        )


@dataclass
class Vote:
    """투표자 1명의 시트별 투표"""
    voter_name: str
    selections: Selections = field(default_factory=dict)
    timestamp: datetime = field(default_factory=now)

    @property
    def voter_key(self) -> str:
        """저장 키 (소문자 이름)"""
        return normalize_name(self.voter_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voterName": self.voter_name,
            "selections": {cat: list(items) for cat, items in self.selections.items()},
            "timestamp": format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vote":
        return cls(
            voter_name=data["voterName"],
            selections={cat: list(items) for cat, items in (data.get("selections") or {}).items()},
            timestamp=parse_timestamp(data.get("timestamp")),
        )


# {이벤트 id: {시트명: [Vote, ...]}}
VoteCollection = Dict[str, Dict[str, List[Vote]]]
