"""
메뉴 투표 시스템 HTTP 핸들러

주요 경로:
- /api/events...: 이벤트/메뉴/투표자 관리
- /api/vote: 투표 제출
- /api/results/{event_id}: 시트 결과
- /api/votes...: 투표자 선택 내역 조회, 투표 초기화
"""
import json
import logging
from typing import Any, Dict

from aiohttp import web

from .manager import VotingManager
from .payloads import create_voter_votes_payload
from .errors import InvalidRequest, ValidationFailed

logger = logging.getLogger(__name__)

MANAGER_KEY = web.AppKey("manager", VotingManager)

routes = web.RouteTableDef()


def _manager(request: web.Request) -> VotingManager:
    return request.app[MANAGER_KEY]


async def _read_json(request: web.Request) -> Dict[str, Any]:
    """
    요청 본문 JSON 읽기

    Raises:
        InvalidRequest: JSON이 아니거나 객체가 아님
    """
    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise InvalidRequest("요청 본문이 올바른 JSON이 아닙니다.")
    if not isinstance(body, dict):
        raise InvalidRequest("요청 본문은 JSON 객체여야 합니다.")
    return body


# ==================== 이벤트 ====================

@routes.get('/api/events')
async def list_events(request: web.Request) -> web.Response:
    events = await _manager(request).list_events()
    return web.json_response([event.to_dict() for event in events])


@routes.post('/api/events')
async def create_event(request: web.Request) -> web.Response:
    body = await _read_json(request)
    event = await _manager(request).create_event(body.get('topic'), body.get('creatorName'))
    return web.json_response({"success": True, "event": event.to_dict()})


@routes.get('/api/events/{event_id}')
async def get_event(request: web.Request) -> web.Response:
    event = await _manager(request).get_event(request.match_info['event_id'])
    return web.json_response(event.to_dict())


@routes.put('/api/events/{event_id}')
async def update_event(request: web.Request) -> web.Response:
    body = await _read_json(request)
    event = await _manager(request).update_event(request.match_info['event_id'], body)
    return web.json_response({"success": True, "event": event.to_dict()})


@routes.put('/api/events/{event_id}/status')
async def set_event_status(request: web.Request) -> web.Response:
    body = await _read_json(request)
    event = await _manager(request).set_status(request.match_info['event_id'], body.get('status'))
    return web.json_response({"success": True, "status": event.status})


@routes.delete('/api/events/{event_id}')
async def delete_event(request: web.Request) -> web.Response:
    await _manager(request).delete_event(request.match_info['event_id'])
    return web.json_response({"success": True})


@routes.put('/api/events/{event_id}/menu')
async def update_menu(request: web.Request) -> web.Response:
    body = await _read_json(request)
    event = await _manager(request).update_menu(request.match_info['event_id'], body.get('menuData'))
    return web.json_response({"success": True, "menuData": event.to_dict()["menuData"]})


# ==================== 투표자 ====================

@routes.post('/api/events/{event_id}/voters')
async def add_voter(request: web.Request) -> web.Response:
    body = await _read_json(request)
    voters = await _manager(request).add_voter(request.match_info['event_id'], body.get('name'))
    return web.json_response({"success": True, "voters": voters})


@routes.delete('/api/events/{event_id}/voters/{name}')
async def remove_voter(request: web.Request) -> web.Response:
    voters = await _manager(request).remove_voter(
        request.match_info['event_id'], request.match_info['name']
    )
    return web.json_response({"success": True, "voters": voters})


# ==================== 투표 ====================

@routes.post('/api/vote')
async def submit_vote(request: web.Request) -> web.Response:
    """투표 제출 (검증 실패 시 위반된 모든 카테고리를 400으로 응답)"""
    body = await _read_json(request)
    result = await _manager(request).submit_vote(
        body.get('eventId'),
        body.get('sheetName'),
        body.get('voterName'),
        body.get('selections'),
    )
    if not result.ok:
        raise ValidationFailed(result.violations)
    return web.json_response({"success": True, "message": "투표가 완료되었습니다!"})


@routes.get('/api/results/{event_id}')
async def get_results(request: web.Request) -> web.Response:
    payload = await _manager(request).get_results(
        request.match_info['event_id'], request.query.get('sheet')
    )
    return web.json_response(payload)


@routes.get('/api/votes/{event_id}/{name}')
async def get_voter_votes(request: web.Request) -> web.Response:
    votes = await _manager(request).get_voter_votes(
        request.match_info['event_id'], request.match_info['name']
    )
    return web.json_response(create_voter_votes_payload(votes))


@routes.delete('/api/events/{event_id}/votes')
async def clear_event_votes(request: web.Request) -> web.Response:
    await _manager(request).clear_votes(request.match_info['event_id'])
    return web.json_response({"success": True, "message": "이 이벤트의 모든 투표가 삭제되었습니다."})


@routes.delete('/api/votes')
async def clear_all_votes(request: web.Request) -> web.Response:
    await _manager(request).clear_votes()
    return web.json_response({"success": True, "message": "모든 투표가 삭제되었습니다."})
