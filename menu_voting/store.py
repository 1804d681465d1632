"""
메뉴 투표 시스템 저장소

주요 클래스:
- VotingStore: 저장소 기본 클래스 (트랜잭션 잠금 담당)
- MemoryStore: 메모리 저장소 (테스트용)
- JsonFileStore: JSON 파일 저장소 (events.json / votes.json)

모든 변경은 transaction() 안에서 일어나며, 프로세스 전역 asyncio.Lock으로
읽기-수정-쓰기 사이클을 직렬화한다. 블록이 예외 없이 끝난 경우에만 저장한다.
"""
import asyncio
import json
import logging
import os
import tempfile
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional

from config import EVENTS_FILE_NAME, VOTES_FILE_NAME, LEGACY_EVENT_FILE_NAME, LOG_MESSAGES
from .models import Event, Vote, VoteCollection
from .errors import StorageError
from .constants import STATUS_OPEN, LEGACY_CREATOR_NAME
from .utils import normalize_name, now, format_timestamp

logger = logging.getLogger(__name__)


@dataclass
class StoreState:
    """트랜잭션 중 수정 가능한 저장소 상태"""
    events: Dict[str, Event] = field(default_factory=dict)
    votes: VoteCollection = field(default_factory=dict)
    discarded: bool = False

    def discard(self) -> None:
        """변경 사항을 저장하지 않고 트랜잭션 종료"""
        self.discarded = True

    def sheet_votes(self, event_id: str, sheet_name: str) -> List[Vote]:
        """시트의 투표 목록 (없으면 생성)"""
        return self.votes.setdefault(event_id, {}).setdefault(sheet_name, [])


def find_vote(sheet_votes: List[Vote], voter_name: str) -> Optional[Vote]:
    """
    시트 투표 목록에서 투표자의 투표 찾기 (대소문자 무시)

    Args:
        sheet_votes: 시트의 투표 목록
        voter_name: 투표자 이름

    Returns:
        투표 (없으면 None)
    """
    key = normalize_name(voter_name)
    return next((vote for vote in sheet_votes if vote.voter_key == key), None)


def upsert_vote(sheet_votes: List[Vote], vote: Vote) -> bool:
    """
    투표 추가 또는 교체

    같은 투표자(대소문자 무시)의 기존 투표가 있으면 같은 위치에서 교체하고,
    없으면 목록 끝에 추가한다. 표시 이름은 새 투표의 이름을 따른다.

    Args:
        sheet_votes: 시트의 투표 목록 (직접 수정됨)
        vote: 새 투표

    Returns:
        기존 투표를 교체했으면 True, 새로 추가했으면 False
    """
    for index, existing in enumerate(sheet_votes):
        if existing.voter_key == vote.voter_key:
            sheet_votes[index] = vote
            return True
    sheet_votes.append(vote)
    return False


# ==================== 직렬화 ====================

def _events_from_raw(raw: Dict[str, Any]) -> Dict[str, Event]:
    return {event_id: Event.from_dict(data) for event_id, data in raw.items()}


def _events_to_raw(events: Dict[str, Event]) -> Dict[str, Any]:
    return {event_id: event.to_dict() for event_id, event in events.items()}


def _votes_from_raw(raw: Dict[str, Any]) -> VoteCollection:
    return {
        event_id: {
            sheet: [Vote.from_dict(v) for v in sheet_votes]
            for sheet, sheet_votes in sheets.items()
        }
        for event_id, sheets in raw.items()
    }


def _votes_to_raw(votes: VoteCollection) -> Dict[str, Any]:
    return {
        event_id: {
            sheet: [v.to_dict() for v in sheet_votes]
            for sheet, sheet_votes in sheets.items()
        }
        for event_id, sheets in votes.items()
    }


def _state_from_raw(events_raw: Dict[str, Any], votes_raw: Dict[str, Any], source: Any) -> StoreState:
    """
    저장된 원시 데이터를 StoreState로 변환

    Raises:
        StorageError: 레코드 형식이 올바르지 않음 (필수 키 누락 등)
    """
    try:
        return StoreState(
            events=_events_from_raw(events_raw),
            votes=_votes_from_raw(votes_raw),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error(LOG_MESSAGES['store_read_failed'].format(path=source, error=repr(e)))
        raise StorageError("저장된 데이터 형식이 올바르지 않습니다.") from e


# ==================== 저장소 ====================

class VotingStore:
    """저장소 기본 클래스"""

    def __init__(self):
        self._lock = asyncio.Lock()

    def _read(self) -> StoreState:
        raise NotImplementedError

    def _write(self, state: StoreState) -> None:
        raise NotImplementedError

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StoreState]:
        """
        읽기-수정-쓰기 트랜잭션

        Yields:
            수정 가능한 StoreState (블록이 정상 종료되고 discard()되지 않으면 저장됨)
        """
        async with self._lock:
            state = self._read()
            yield state
            if not state.discarded:
                self._write(state)

    async def snapshot(self) -> StoreState:
        """현재 상태 사본 (읽기 전용 용도)"""
        async with self._lock:
            return self._read()

    async def load_events(self) -> Dict[str, Event]:
        return (await self.snapshot()).events

    async def load_votes(self) -> VoteCollection:
        return (await self.snapshot()).votes

    async def save_votes(self, votes: VoteCollection) -> None:
        """투표 컬렉션 전체 교체"""
        async with self.transaction() as state:
            state.votes = votes


class MemoryStore(VotingStore):
    """
    메모리 저장소

    파일 저장소와 같은 복사 의미를 갖도록 직렬화된 형태로 보관한다.
    """

    def __init__(self, events: Optional[Dict[str, Event]] = None, votes: Optional[VoteCollection] = None):
        super().__init__()
        self._events_raw = _events_to_raw(events or {})
        self._votes_raw = _votes_to_raw(votes or {})

    def _read(self) -> StoreState:
        return _state_from_raw(self._events_raw, self._votes_raw, source="memory")

    def _write(self, state: StoreState) -> None:
        self._events_raw = _events_to_raw(state.events)
        self._votes_raw = _votes_to_raw(state.votes)


class JsonFileStore(VotingStore):
    """JSON 파일 저장소"""

    def __init__(self, data_dir: str):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.events_path = self.data_dir / EVENTS_FILE_NAME
        self.votes_path = self.data_dir / VOTES_FILE_NAME

        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.events_path.exists():
            self._write_atomic(self.events_path, self._migrate_legacy_event())
        if not self.votes_path.exists():
            self._write_atomic(self.votes_path, {})
        logger.info(LOG_MESSAGES['store_load'].format(path=self.data_dir))

    def _migrate_legacy_event(self) -> Dict[str, Any]:
        """
        단일 이벤트 파일(event.json)을 이벤트 목록 형식으로 변환

        Returns:
            {새 id: 이벤트 dict} (예전 파일이 없거나 읽을 수 없으면 빈 dict)
        """
        legacy_path = self.data_dir / LEGACY_EVENT_FILE_NAME
        if not legacy_path.exists():
            return {}

        try:
            old_event = self._decode(legacy_path.read_bytes())
            if not isinstance(old_event, dict):
                raise ValueError("이벤트 형식이 아닙니다")
            event_id = str(uuid.uuid4())
            event = Event.from_dict({
                "creatorName": LEGACY_CREATOR_NAME,
                **old_event,
                "id": event_id,
                "status": STATUS_OPEN,
                "allowedVoters": [],
                "createdAt": format_timestamp(now()),
            })
        except (OSError, UnicodeError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"⚠️ 예전 이벤트 파일을 이전하지 못해 빈 목록으로 시작: {legacy_path} ({e!r})")
            return {}

        logger.info(LOG_MESSAGES['store_migrated'].format(path=legacy_path, event_id=event_id))
        return _events_to_raw({event_id: event})

    def _read(self) -> StoreState:
        return _state_from_raw(
            self._read_json(self.events_path),
            self._read_json(self.votes_path),
            source=self.data_dir,
        )

    def _write(self, state: StoreState) -> None:
        self._write_atomic(self.events_path, _events_to_raw(state.events))
        self._write_atomic(self.votes_path, _votes_to_raw(state.votes))

    @staticmethod
    def _decode(raw: bytes) -> Any:
        """UTF-8로 읽고, 실패하면 UTF-16(BOM 포함)으로 다시 시도"""
        try:
            return json.loads(raw.decode('utf-8-sig'))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return json.loads(raw.decode('utf-16').lstrip('\ufeff'))

    def _read_json(self, path: Path) -> Dict[str, Any]:
        """
        JSON 파일 읽기

        Returns:
            dict (파일이 없거나 예전 배열 형식이면 빈 dict)

        Raises:
            StorageError: 파일을 읽거나 해석할 수 없음
        """
        if not path.exists():
            return {}
        try:
            data = self._decode(path.read_bytes())
        except (OSError, UnicodeError, ValueError) as e:
            logger.error(LOG_MESSAGES['store_read_failed'].format(path=path, error=e))
            raise StorageError("저장된 데이터를 읽을 수 없습니다.") from e

        if not isinstance(data, dict):
            logger.warning(f"⚠️ 예상하지 못한 형식이라 빈 데이터로 처리: {path}")
            return {}
        return data

    def _write_atomic(self, path: Path, payload: Any) -> None:
        """임시 파일에 쓴 뒤 교체 (부분 쓰기가 보이지 않음)"""
        serialized = json.dumps(payload, ensure_ascii=False, indent=2)
        temp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", dir=path.parent, delete=False, encoding="utf-8", suffix=".tmp"
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(serialized)
                tmp.flush()
                os.fsync(tmp.fileno())
            temp_path.replace(path)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            logger.error(LOG_MESSAGES['store_save_failed'].format(path=path, error=e))
            raise StorageError("데이터를 저장하지 못했습니다.") from e
