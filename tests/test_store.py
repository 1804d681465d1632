"""menu_voting.store 테스트"""
import asyncio
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from menu_voting.models import Vote
from menu_voting.store import MemoryStore, JsonFileStore, find_vote, upsert_vote
from menu_voting.errors import StorageError, NotFound


@pytest.mark.unit
class TestUpsertVote:
    """투표 추가/교체 테스트"""

    def test_append_new_voter(self):
        sheet_votes = [Vote("Alice", {"면": ["짜장면"]})]
        replaced = upsert_vote(sheet_votes, Vote("Bob", {"면": ["짬뽕"]}))
        assert replaced is False
        assert [v.voter_name for v in sheet_votes] == ["Alice", "Bob"]

    def test_replace_in_place_case_insensitive(self):
        """대소문자만 다른 이름은 같은 위치에서 교체"""
        sheet_votes = [
            Vote("Alice", {"면": ["짜장면"]}),
            Vote("Bob", {"면": ["짬뽕"]}),
        ]
        replaced = upsert_vote(sheet_votes, Vote("alice", {"면": ["짬뽕"]}))

        assert replaced is True
        assert len(sheet_votes) == 2
        assert sheet_votes[0].voter_name == "alice"
        assert sheet_votes[0].selections == {"면": ["짬뽕"]}

    def test_find_vote(self):
        sheet_votes = [Vote("Alice", {"면": ["짜장면"]})]
        assert find_vote(sheet_votes, " ALICE ") is sheet_votes[0]
        assert find_vote(sheet_votes, "Bob") is None


@pytest.mark.unit
class TestMemoryStore:
    """메모리 저장소 테스트"""

    @pytest.mark.asyncio
    async def test_transaction_persists(self, store, sample_event):
        async with store.transaction() as state:
            state.sheet_votes(sample_event.id, "저녁").append(Vote("Alice", {"면": ["짬뽕"]}))

        votes = await store.load_votes()
        assert votes[sample_event.id]["저녁"][0].voter_name == "Alice"

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self, store, sample_event):
        """스냅샷을 수정해도 저장소에 반영되지 않음"""
        events = await store.load_events()
        events[sample_event.id].topic = "변경됨"

        assert (await store.load_events())[sample_event.id].topic == "팀 회식"

    @pytest.mark.asyncio
    async def test_exception_rolls_back(self, store, sample_event):
        """예외가 발생하면 저장하지 않음"""
        with pytest.raises(NotFound):
            async with store.transaction() as state:
                state.events[sample_event.id].topic = "변경됨"
                raise NotFound("테스트")

        assert (await store.load_events())[sample_event.id].topic == "팀 회식"

    @pytest.mark.asyncio
    async def test_discard(self, store, sample_event):
        """discard()하면 저장하지 않음"""
        async with store.transaction() as state:
            state.events[sample_event.id].topic = "변경됨"
            state.discard()

        assert (await store.load_events())[sample_event.id].topic == "팀 회식"

    @pytest.mark.asyncio
    async def test_save_votes(self, store):
        await store.save_votes({"e": {"s": [Vote("Alice", {"c": ["x"]})]}})
        votes = await store.load_votes()
        assert votes["e"]["s"][0].selections == {"c": ["x"]}

    @pytest.mark.asyncio
    async def test_concurrent_transactions_do_not_lose_updates(self, store, sample_event):
        """동시에 실행된 트랜잭션이 서로의 변경을 덮어쓰지 않음"""
        async def add(name):
            async with store.transaction() as state:
                sheet_votes = state.sheet_votes(sample_event.id, "저녁")
                await asyncio.sleep(0)  # 다른 태스크에 실행 기회 양보
                upsert_vote(sheet_votes, Vote(name, {"면": ["짜장면"]}))

        await asyncio.gather(*(add(f"voter{i}") for i in range(10)))

        votes = await store.load_votes()
        assert len(votes[sample_event.id]["저녁"]) == 10

    @pytest.mark.asyncio
    async def test_malformed_record_raises_storage_error(self):
        """필수 키가 없는 레코드는 StorageError로 보고"""
        store = MemoryStore()
        store._events_raw = {"e": {"id": "e", "topic": "회식", "menuData": {"점심": [{"items": ["불고기"]}]}}}

        with pytest.raises(StorageError):
            await store.load_events()


@pytest.mark.unit
class TestJsonFileStore:
    """JSON 파일 저장소 테스트"""

    @pytest.mark.asyncio
    async def test_creates_empty_files(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "data"))
        assert json.loads(store.events_path.read_text(encoding="utf-8")) == {}
        assert json.loads(store.votes_path.read_text(encoding="utf-8")) == {}
        assert await store.load_events() == {}

    @pytest.mark.asyncio
    async def test_round_trip_through_files(self, tmp_path, sample_event):
        """다시 열어도 데이터 유지"""
        store = JsonFileStore(str(tmp_path))
        async with store.transaction() as state:
            state.events[sample_event.id] = sample_event
            state.sheet_votes(sample_event.id, "점심").append(
                Vote("Alice", {"메인": ["불고기"], "음료": ["콜라"]})
            )

        reopened = JsonFileStore(str(tmp_path))
        events = await reopened.load_events()
        votes = await reopened.load_votes()

        event = events[sample_event.id]
        assert event.topic == "팀 회식"
        assert [c.name for c in event.get_sheet("점심")] == ["메인", "음료"]
        assert event.get_sheet("점심")[0].quota == 2
        assert votes[sample_event.id]["점심"][0].selections["메인"] == ["불고기"]

    @pytest.mark.asyncio
    async def test_unicode_written_as_is(self, tmp_path, sample_event):
        store = JsonFileStore(str(tmp_path))
        async with store.transaction() as state:
            state.events[sample_event.id] = sample_event
        assert "팀 회식" in store.events_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_legacy_event_defaults(self, tmp_path):
        """status/allowedVoters/creatorName이 없는 예전 데이터"""
        (tmp_path / "events.json").write_text(
            json.dumps({"old": {"id": "old", "topic": "예전 이벤트", "menuData": {}}}),
            encoding="utf-8"
        )
        store = JsonFileStore(str(tmp_path))
        event = (await store.load_events())["old"]

        assert event.status == "open"
        assert event.allowed_voters == []
        assert event.creator_name == "Unknown"

    @pytest.mark.asyncio
    async def test_array_votes_file_treated_as_empty(self, tmp_path):
        (tmp_path / "votes.json").write_text("[]", encoding="utf-8")
        store = JsonFileStore(str(tmp_path))
        assert await store.load_votes() == {}

    @pytest.mark.asyncio
    async def test_utf16_votes_file(self, tmp_path):
        """UTF-16으로 저장된 파일도 읽음"""
        payload = {"e": {"s": [{"voterName": "Alice", "selections": {"c": ["x"]},
                                 "timestamp": "2025-01-01T00:00:00Z"}]}}
        (tmp_path / "votes.json").write_bytes(json.dumps(payload).encode("utf-16"))
        store = JsonFileStore(str(tmp_path))

        votes = await store.load_votes()
        assert votes["e"]["s"][0].voter_name == "Alice"

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path):
        """손상된 파일은 빈 데이터로 덮어쓰지 않고 에러"""
        (tmp_path / "events.json").write_text("{not json", encoding="utf-8")
        store = JsonFileStore(str(tmp_path))

        with pytest.raises(StorageError):
            await store.load_events()
        assert (tmp_path / "events.json").read_text(encoding="utf-8") == "{not json"

    @pytest.mark.asyncio
    async def test_no_temp_files_left(self, tmp_path, sample_event):
        store = JsonFileStore(str(tmp_path))
        async with store.transaction() as state:
            state.events[sample_event.id] = sample_event
        assert sorted(p.name for p in tmp_path.iterdir()) == ["events.json", "votes.json"]

    @pytest.mark.asyncio
    async def test_category_without_name_raises_storage_error(self, tmp_path):
        (tmp_path / "events.json").write_text(json.dumps({
            "e": {"id": "e", "topic": "회식", "menuData": {"점심": [{"quota": 1, "items": ["불고기"]}]}}
        }), encoding="utf-8")
        store = JsonFileStore(str(tmp_path))

        with pytest.raises(StorageError):
            await store.load_events()

    @pytest.mark.asyncio
    async def test_vote_without_voter_raises_storage_error(self, tmp_path):
        (tmp_path / "votes.json").write_text(
            json.dumps({"e": {"s": [{"selections": {"c": ["x"]}}]}}), encoding="utf-8"
        )
        store = JsonFileStore(str(tmp_path))

        with pytest.raises(StorageError):
            await store.load_votes()

    @pytest.mark.asyncio
    async def test_failed_replace_removes_temp_file(self, tmp_path, sample_event):
        """교체 실패 시 임시 파일을 남기지 않고 기존 파일 유지"""
        store = JsonFileStore(str(tmp_path))

        with patch.object(Path, "replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError):
                async with store.transaction() as state:
                    state.events[sample_event.id] = sample_event

        assert sorted(p.name for p in tmp_path.iterdir()) == ["events.json", "votes.json"]
        assert await store.load_events() == {}


@pytest.mark.unit
class TestLegacyEventMigration:
    """단일 이벤트 파일(event.json) 이전 테스트"""

    @pytest.mark.asyncio
    async def test_migrates_single_event(self, tmp_path):
        (tmp_path / "event.json").write_text(json.dumps({
            "topic": "예전 회식",
            "menuData": {"저녁": [{"category": "면", "quota": 1, "items": ["짜장면", "짬뽕"]}]},
            "status": "closed",
            "allowedVoters": ["Alice"],
        }), encoding="utf-8")

        store = JsonFileStore(str(tmp_path))
        events = await store.load_events()

        assert len(events) == 1
        event_id, event = next(iter(events.items()))
        assert event.id == event_id
        assert event.topic == "예전 회식"
        assert event.creator_name == "Legacy Admin"
        assert event.status == "open"
        assert event.allowed_voters == []
        assert event.get_sheet("저녁")[0].items == ["짜장면", "짬뽕"]

    @pytest.mark.asyncio
    async def test_existing_events_file_not_overwritten(self, tmp_path):
        (tmp_path / "events.json").write_text("{}", encoding="utf-8")
        (tmp_path / "event.json").write_text(json.dumps({"topic": "예전 회식"}), encoding="utf-8")

        store = JsonFileStore(str(tmp_path))
        assert await store.load_events() == {}

    @pytest.mark.asyncio
    async def test_unreadable_legacy_file_starts_empty(self, tmp_path):
        (tmp_path / "event.json").write_text("{not json", encoding="utf-8")

        store = JsonFileStore(str(tmp_path))
        assert await store.load_events() == {}
