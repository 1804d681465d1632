"""pytest 공통 설정 및 fixtures"""
import pytest

try:
    from aiohttp.test_utils import TestClient, TestServer
except ImportError:
    raise ImportError(
        "aiohttp가 설치되지 않았습니다.\n"
        "실행: pip install -e .[test]"
    )

from menu_voting.models import Event
from menu_voting.menu import parse_menu_data
from menu_voting.store import MemoryStore
from menu_voting.manager import VotingManager


# ==================== 테스트 데이터 Fixtures ====================

@pytest.fixture
def sample_menu_raw():
    """샘플 메뉴 데이터 (수동 입력 형식)"""
    return {
        "점심": [
            {"category": "메인", "quota": 2, "items": ["김치찌개", "된장찌개", "불고기"]},
            {"category": "음료", "quota": 1, "items": ["콜라", "사이다"]},
        ],
        "저녁": [
            {"category": "면", "quota": 1, "items": ["짜장면", "짬뽕"]},
        ],
    }


@pytest.fixture
def sample_event(sample_menu_raw):
    """메뉴와 허용 투표자가 설정된 이벤트"""
    return Event(
        id="event-1",
        topic="팀 회식",
        creator_name="관리자",
        menu_data=parse_menu_data(sample_menu_raw),
        allowed_voters=["Alice", "Bob", "Charlie", "Dave"],
    )


@pytest.fixture
def lunch_categories(sample_event):
    """'점심' 시트의 카테고리 목록"""
    return sample_event.get_sheet("점심")


# ==================== 저장소/관리자 Fixtures ====================

@pytest.fixture
def store(sample_event):
    """샘플 이벤트가 들어 있는 메모리 저장소"""
    return MemoryStore(events={sample_event.id: sample_event})


@pytest.fixture
def manager(store):
    """메모리 저장소를 사용하는 투표 관리자"""
    return VotingManager(store)


@pytest.fixture
async def client(store):
    """aiohttp 테스트 클라이언트"""
    from server import create_app

    async with TestClient(TestServer(create_app(store))) as test_client:
        yield test_client
