"""
메뉴 투표 시스템 예외 정의

HTTP 계층은 MenuVotingError의 status 값을 그대로 응답 코드로 사용한다.
"""
from typing import Any, Dict, List, Optional


class MenuVotingError(Exception):
    """메뉴 투표 시스템 기본 예외"""
    status = 500

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFound(MenuVotingError):
    """이벤트/시트/투표자를 찾을 수 없음"""
    status = 404


class Forbidden(MenuVotingError):
    """투표 마감 또는 허용되지 않은 투표자"""
    status = 403


class InvalidRequest(MenuVotingError):
    """요청 파라미터 누락 또는 형식 오류"""
    status = 400


class Conflict(MenuVotingError):
    """이미 존재하는 항목 (예: 중복 투표자)"""
    status = 409


class StorageError(MenuVotingError):
    """저장소 읽기/쓰기 실패"""
    status = 500


class ValidationFailed(MenuVotingError):
    """
    투표 선택 검증 실패

    위반된 모든 카테고리를 한 번에 담아서 전달한다.
    """
    status = 400

    def __init__(self, violations: list, message: str = "선택 항목이 올바르지 않습니다."):
        super().__init__(message)
        self.violations = list(violations)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "violations": [v.to_dict() for v in self.violations],
        }
