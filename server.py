"""
메뉴 투표 서버 - aiohttp 웹 서버

주요 기능:
- 이벤트 관리 (/api/events)
- 투표 제출 (/api/vote)
- 결과 조회 (/api/results)
- 헬스체크 (/health)
"""
import logging
from typing import Optional

from aiohttp import web

from menu_voting import VotingManager, VotingStore, JsonFileStore, MenuVotingError
from menu_voting.views import routes, MANAGER_KEY
from config import HOST, PORT, DATA_DIR, LOG_MESSAGES, setup_logging

# 로거 설정
logger = logging.getLogger(__name__)


# ==================== Error Handling ====================

@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """
    요청 에러 처리 미들웨어

    - MenuVotingError: 상태 코드와 함께 JSON 에러 응답
    - aiohttp HTTP 예외 (404 경로 등): 그대로 전달
    - 그 외 예외: 로깅 후 500 응답
    """
    try:
        return await handler(request)

    except web.HTTPException:
        raise

    except MenuVotingError as e:
        logger.warning(f"⚠️ {request.method} {request.path} → {e.status}: {e.message}")
        return web.json_response(e.to_dict(), status=e.status)

    except Exception as e:
        logger.error(f"❌ {request.method} {request.path} 처리 중 에러 발생: {e}", exc_info=True)
        return web.json_response(
            {"error": "서버 오류가 발생했습니다. 잠시 후 다시 시도해주세요."},
            status=500
        )


# ==================== Web Server ====================

async def health_check(request: web.Request) -> web.Response:
    """헬스체크 엔드포인트"""
    return web.Response(text="OK", status=200)


def create_app(store: Optional[VotingStore] = None) -> web.Application:
    """
    웹 애플리케이션 생성

    Args:
        store: 저장소 (없으면 DATA_DIR의 JSON 파일 저장소)

    Returns:
        aiohttp Application
    """
    app = web.Application(middlewares=[error_middleware])
    app[MANAGER_KEY] = VotingManager(store or JsonFileStore(DATA_DIR))
    app.router.add_get('/health', health_check)
    app.add_routes(routes)
    return app


def main() -> None:
    """서버 시작"""
    # 로깅 시스템 초기화
    setup_logging()

    app = create_app()
    logger.info(LOG_MESSAGES['server_start'].format(host=HOST, port=PORT))
    web.run_app(app, host=HOST, port=PORT, print=None)


if __name__ == "__main__":
    main()
