"""
서버 설정 및 상수 정의
"""
import logging
import os
from datetime import timezone
from typing import Dict

# 시간대 설정 (저장되는 타임스탬프 기준)
TIMEZONE = timezone.utc

# 네트워크 설정
HOST = os.environ.get('HOST', '0.0.0.0')
PORT = int(os.environ.get('PORT', '3000'))

# 저장소 설정
DATA_DIR = os.environ.get('DATA_DIR', 'data')
EVENTS_FILE_NAME = 'events.json'
VOTES_FILE_NAME = 'votes.json'
LEGACY_EVENT_FILE_NAME = 'event.json'  # 단일 이벤트 시절 파일 (최초 실행 시 이전)

# 로깅 설정
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# 로깅 메시지
LOG_MESSAGES: Dict[str, str] = {
    'server_start': "🚀 서버 시작: http://{host}:{port}",
    'store_load': "📂 저장소 로드: {path}",
    'store_save_failed': "❌ 저장 실패: {path} ({error})",
    'store_read_failed': "❌ 읽기 실패: {path} ({error})",
    'store_migrated': "🔄 예전 이벤트 파일 이전: {path} → id={event_id}",
    'event_created': "🆕 이벤트 생성: {topic} (생성자: {creator}, id={event_id})",
    'event_deleted': "🗑️ 이벤트 삭제: {event_id}",
    'event_status': "🔒 이벤트 상태 변경: {event_id} → {status}",
    'menu_updated': "📋 메뉴 갱신: {event_id} (시트 {sheet_count}개)",
    'voter_added': "👤 투표자 추가: {name} (이벤트 {event_id})",
    'voter_removed': "👋 투표자 삭제: {name} (이벤트 {event_id})",
    'vote_accepted': "🗳️ 투표 접수: {voter} → {event_id}/{sheet} ({mode})",
    'vote_rejected': "⚠️ 투표 거부: {voter} → {event_id}/{sheet} (위반 {count}건)",
    'votes_cleared': "🧹 투표 초기화: {scope}",
}


def setup_logging(level: str = None) -> None:
    """
    로깅 시스템 초기화

    Args:
        level: 로그 레벨 이름 (없으면 LOG_LEVEL 환경변수 값 사용)
    """
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
    # aiohttp 접근 로그는 너무 많으므로 경고 이상만 출력
    logging.getLogger('aiohttp.access').setLevel(logging.WARNING)
