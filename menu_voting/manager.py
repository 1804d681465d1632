"""
메뉴 투표 이벤트 관리자

주요 기능:
- 이벤트 생성/수정/삭제, 상태 변경, 메뉴 갱신
- 허용 투표자 추가/삭제
- 투표 제출 (검증 후 투표자별 덮어쓰기 저장)
- 결과 집계 및 순위 계산
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from config import LOG_MESSAGES
from .models import Event, Vote, Selections
from .store import VotingStore, StoreState, find_vote, upsert_vote
from .validation import ValidationResult, validate_selections
from .tally import tally_votes, rank_sheet, log_category_results
from .menu import parse_menu_data
from .payloads import create_results_payload
from .permissions import ensure_can_vote, is_voter_allowed
from .errors import NotFound, InvalidRequest, Conflict
from .constants import EVENT_STATUSES, EDITABLE_EVENT_FIELDS
from .utils import now

logger = logging.getLogger(__name__)


def _require_event(state: StoreState, event_id: str) -> Event:
    event = state.events.get(event_id)
    if event is None:
        raise NotFound("이벤트를 찾을 수 없습니다.")
    return event


def _require_text(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(message)
    return value.strip()


def _coerce_selections(raw: Any) -> Dict[str, List[str]]:
    """
    요청의 선택 데이터 형식 확인

    Raises:
        InvalidRequest: dict가 아니거나, 비어 있거나, 값이 문자열 배열이 아님
    """
    if not isinstance(raw, Mapping) or not raw:
        raise InvalidRequest("투표 정보가 누락되었습니다.")

    selections = {}
    for category, items in raw.items():
        if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
            raise InvalidRequest(f"'{category}' 카테고리의 선택 형식이 올바르지 않습니다.")
        selections[str(category)] = [i.strip() for i in items]
    return selections


class VotingManager:
    """투표 이벤트 관리자"""

    def __init__(self, store: VotingStore):
        self.store = store

    # ==================== 이벤트 ====================

    async def list_events(self) -> List[Event]:
        """이벤트 목록 (최신순)"""
        events = await self.store.load_events()
        return sorted(events.values(), key=lambda e: e.created_at, reverse=True)

    async def get_event(self, event_id: str) -> Event:
        """
        이벤트 가져오기

        Raises:
            NotFound: 이벤트 없음
        """
        return _require_event(await self.store.snapshot(), event_id)

    async def event_exists(self, event_id: str) -> bool:
        return event_id in await self.store.load_events()

    async def is_voter_allowed(self, event_id: str, name: str) -> bool:
        """허용 투표자 여부 (이벤트가 없으면 False)"""
        event = (await self.store.load_events()).get(event_id)
        return event is not None and is_voter_allowed(event, name)

    async def create_event(self, topic: Any, creator_name: Any) -> Event:
        """
        새 이벤트 생성

        Args:
            topic: 이벤트 주제
            creator_name: 생성자 이름

        Returns:
            생성된 이벤트
        """
        topic = _require_text(topic, "주제를 입력해주세요.")
        creator_name = _require_text(creator_name, "생성자 이름을 입력해주세요.")

        event = Event(topic=topic, creator_name=creator_name)
        async with self.store.transaction() as state:
            state.events[event.id] = event

        logger.info(LOG_MESSAGES['event_created'].format(
            topic=topic, creator=creator_name, event_id=event.id
        ))
        return event

    async def update_event(self, event_id: str, fields: Mapping[str, Any]) -> Event:
        """
        이벤트 정보 수정 (topic/date/time/location만, 전달된 값만 반영)

        Args:
            event_id: 이벤트 ID
            fields: {필드명: 값}

        Returns:
            수정된 이벤트
        """
        async with self.store.transaction() as state:
            event = _require_event(state, event_id)
            for key, attr in EDITABLE_EVENT_FIELDS.items():
                if key in fields and fields[key] is not None:
                    setattr(event, attr, str(fields[key]))
        return event

    async def set_status(self, event_id: str, status: Any) -> Event:
        """
        이벤트 상태 변경

        Raises:
            InvalidRequest: 'open' / 'closed' 가 아닌 값
        """
        if status not in EVENT_STATUSES:
            raise InvalidRequest("상태 값이 올바르지 않습니다. 'open' 또는 'closed'만 가능합니다.")

        async with self.store.transaction() as state:
            event = _require_event(state, event_id)
            event.status = status

        logger.info(LOG_MESSAGES['event_status'].format(event_id=event_id, status=status))
        return event

    async def delete_event(self, event_id: str) -> None:
        """이벤트와 해당 이벤트의 모든 투표 삭제"""
        async with self.store.transaction() as state:
            _require_event(state, event_id)
            del state.events[event_id]
            state.votes.pop(event_id, None)

        logger.info(LOG_MESSAGES['event_deleted'].format(event_id=event_id))

    async def update_menu(self, event_id: str, raw_menu: Any) -> Event:
        """
        메뉴 전체 교체

        Args:
            event_id: 이벤트 ID
            raw_menu: {시트명: [{category, quota, items}, ...]}

        Returns:
            수정된 이벤트
        """
        menu_data = parse_menu_data(raw_menu)

        async with self.store.transaction() as state:
            event = _require_event(state, event_id)
            event.menu_data = menu_data

        logger.info(LOG_MESSAGES['menu_updated'].format(event_id=event_id, sheet_count=len(menu_data)))
        return event

    # ==================== 투표자 ====================

    async def add_voter(self, event_id: str, name: Any) -> List[str]:
        """
        허용 투표자 추가

        Returns:
            갱신된 허용 투표자 목록

        Raises:
            Conflict: 이미 등록된 이름 (대소문자 무시)
        """
        name = _require_text(name, "이름을 입력해주세요.")

        async with self.store.transaction() as state:
            event = _require_event(state, event_id)
            if not event.add_voter(name):
                raise Conflict("이미 이 이벤트에 등록된 투표자입니다.")

        logger.info(LOG_MESSAGES['voter_added'].format(name=name, event_id=event_id))
        return event.allowed_voters

    async def remove_voter(self, event_id: str, name: str) -> List[str]:
        """
        허용 투표자 삭제

        Returns:
            갱신된 허용 투표자 목록

        Raises:
            NotFound: 목록에 없는 이름
        """
        async with self.store.transaction() as state:
            event = _require_event(state, event_id)
            if not event.remove_voter(name):
                raise NotFound("이 이벤트에 등록되지 않은 투표자입니다.")

        logger.info(LOG_MESSAGES['voter_removed'].format(name=name, event_id=event_id))
        return event.allowed_voters

    # ==================== 투표 ====================

    async def submit_vote(
        self,
        event_id: Any,
        sheet_name: Any,
        voter_name: Any,
        selections: Any
    ) -> ValidationResult:
        """
        투표 제출

        검증에 실패하면 아무것도 저장하지 않고 위반 목록을 반환한다.
        같은 투표자(대소문자 무시)가 다시 제출하면 기존 투표를 교체한다.

        Args:
            event_id: 이벤트 ID
            sheet_name: 시트 이름
            voter_name: 투표자 이름
            selections: {카테고리명: [메뉴명, ...]}

        Returns:
            ValidationResult (ok가 False면 위반 목록 포함)

        Raises:
            InvalidRequest: 필수 파라미터 누락
            NotFound: 이벤트 또는 시트 없음
            Forbidden: 투표 마감 또는 허용되지 않은 투표자
        """
        event_id = _require_text(event_id, "투표 정보가 누락되었습니다.")
        sheet_name = _require_text(sheet_name, "투표 정보가 누락되었습니다.")
        voter_name = _require_text(voter_name, "투표 정보가 누락되었습니다.")
        selections = _coerce_selections(selections)

        async with self.store.transaction() as state:
            event = _require_event(state, event_id)
            ensure_can_vote(event, voter_name)

            categories = event.get_sheet(sheet_name)
            if categories is None:
                raise NotFound("시트를 찾을 수 없습니다.")

            result = validate_selections(categories, selections)
            if not result.ok:
                state.discard()
                logger.warning(LOG_MESSAGES['vote_rejected'].format(
                    voter=voter_name, event_id=event_id, sheet=sheet_name, count=len(result.violations)
                ))
                return result

            vote = Vote(voter_name=voter_name, selections=result.selections, timestamp=now())
            replaced = upsert_vote(state.sheet_votes(event_id, sheet_name), vote)

        logger.info(LOG_MESSAGES['vote_accepted'].format(
            voter=voter_name, event_id=event_id, sheet=sheet_name,
            mode="수정" if replaced else "신규"
        ))
        return result

    async def get_voter_votes(self, event_id: str, name: str) -> Dict[str, Selections]:
        """
        투표자의 시트별 선택 내역

        Returns:
            {시트명: {카테고리명: [메뉴명, ...]}} (투표하지 않은 시트는 없음)
        """
        state = await self.store.snapshot()
        _require_event(state, event_id)

        votes_by_sheet = {}
        for sheet, sheet_votes in state.votes.get(event_id, {}).items():
            vote = find_vote(sheet_votes, name)
            if vote:
                votes_by_sheet[sheet] = vote.selections
        return votes_by_sheet

    async def clear_votes(self, event_id: Optional[str] = None) -> None:
        """
        투표 초기화

        Args:
            event_id: 이벤트 ID (None이면 모든 이벤트의 투표 삭제)
        """
        async with self.store.transaction() as state:
            if event_id is None:
                state.votes = {}
            else:
                state.votes.pop(event_id, None)

        logger.info(LOG_MESSAGES['votes_cleared'].format(scope=event_id or "전체"))

    # ==================== 결과 ====================

    async def get_results(self, event_id: str, sheet_name: Optional[str]) -> Dict[str, Any]:
        """
        시트 결과 집계

        Args:
            event_id: 이벤트 ID
            sheet_name: 시트 이름

        Returns:
            {totalVotes, tally, votersByItem, votesList, categories}
        """
        if not sheet_name:
            raise InvalidRequest("시트 이름(sheet)이 필요합니다.")

        state = await self.store.snapshot()
        event = _require_event(state, event_id)
        categories = event.get_sheet(sheet_name)
        if categories is None:
            raise NotFound("시트를 찾을 수 없습니다.")

        sheet_votes = state.votes.get(event_id, {}).get(sheet_name, [])
        tally = tally_votes(sheet_votes)
        results = rank_sheet(categories, tally)
        log_category_results(f"{event.topic} / {sheet_name}", results)

        return create_results_payload(sheet_votes, tally, results)
