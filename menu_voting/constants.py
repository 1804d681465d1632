"""
메뉴 투표 시스템 상수 정의
"""

# 이벤트 상태
STATUS_OPEN = "open"
STATUS_CLOSED = "closed"
EVENT_STATUSES = (STATUS_OPEN, STATUS_CLOSED)

# 기존 데이터에 값이 없을 때 사용할 기본값
DEFAULT_CREATOR_NAME = "Unknown"
LEGACY_CREATOR_NAME = "Legacy Admin"  # 단일 이벤트 파일에서 이전된 이벤트

# 카테고리 선택 제약
DEFAULT_QUOTA = 1  # 쿼터가 지정되지 않은 카테고리의 기본 선택 개수
MIN_QUOTA = 1  # 최소 쿼터

# 수정 가능한 이벤트 필드 (JSON 키 → 속성명)
EDITABLE_EVENT_FIELDS = {
    "topic": "topic",
    "date": "date",
    "time": "time",
    "location": "location",
}

# 결과 분류
CLASSIFICATION_WINNER = "winner"
CLASSIFICATION_TIED = "tied"  # 쿼터를 넘는 동점, 수동 결정 필요
CLASSIFICATION_NONE = "none"

# 분류 이모지 (로그용)
CLASSIFICATION_EMOJIS = {
    CLASSIFICATION_WINNER: "🏆",
    CLASSIFICATION_TIED: "⚔️",
    CLASSIFICATION_NONE: "  ",
}

# 검증 위반 종류
VIOLATION_INCOMPLETE = "incomplete_selection"
VIOLATION_QUOTA = "quota_violation"
VIOLATION_UNKNOWN_ITEM = "unknown_item"
VIOLATION_UNKNOWN_CATEGORY = "unknown_category"
