"""
메뉴 투표 시스템 권한 관리

주요 기능:
- 투표 가능 여부 확인 (이벤트 상태 + 허용 투표자 목록)
"""
from .models import Event
from .errors import Forbidden


def is_voter_allowed(event: Event, name: str) -> bool:
    """
    허용 투표자 여부 확인

    Args:
        event: 투표 이벤트
        name: 투표자 이름 (대소문자 무시)

    Returns:
        허용 목록에 있으면 True
    """
    return event.is_voter_allowed(name)


def ensure_can_vote(event: Event, name: str) -> None:
    """
    투표 가능 여부 확인

    Raises:
        Forbidden: 투표가 마감되었거나 허용되지 않은 투표자
    """
    if not event.is_open:
        raise Forbidden("이 이벤트의 투표가 마감되었습니다.")
    if not is_voter_allowed(event, name):
        raise Forbidden("이 이벤트의 투표자 목록에 없는 이름입니다. 생성자에게 문의해주세요.")
