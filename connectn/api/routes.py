from __future__ import annotations

import logging
from uuid import uuid4

import redis
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from connectn.actions import dispatch_raw, handle_disconnect
from connectn.api.deps import get_registry
from connectn.api.models import SessionListResponse, SessionState
from connectn.session_store import SessionRegistry
from connectn.streams import EventLog, read_events
from connectn.websocket_hub import hub

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def session_ws(websocket: WebSocket, registry: SessionRegistry = Depends(get_registry)) -> None:
    connection_id = uuid4().hex
    await hub.connect(connection_id, websocket)
    logger.info("Connection %s opened", connection_id)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            # Text and binary frames carry the same JSON messages.
            raw = frame["text"] if frame.get("text") is not None else frame.get("bytes") or b""
            await hub.deliver(dispatch_raw(registry=registry, connection_id=connection_id, raw=raw))
    except WebSocketDisconnect:
        logger.info("Connection %s closed", connection_id)
    finally:
        await hub.disconnect(connection_id)
        await hub.deliver(handle_disconnect(registry=registry, connection_id=connection_id))


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions_route(registry: SessionRegistry = Depends(get_registry)) -> SessionListResponse:
    return SessionListResponse(sessions=registry.list_sessions())


@router.get("/sessions/{code}", response_model=SessionState)
async def get_session_route(code: str, registry: SessionRegistry = Depends(get_registry)) -> SessionState:
    state = registry.get(code)
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return state


@router.get("/sessions/{code}/events")
async def get_session_events_route(
    code: str,
    count: int = 50,
    start: str = "-",
    end: str = "+",
    registry: SessionRegistry = Depends(get_registry),
) -> dict[str, object]:
    """Debug endpoint: read a session's broadcast log from its Redis Stream."""

    if count < 1 or count > 500:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 500")

    state = registry.get(code)
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")

    log = EventLog(session_code=state.code)
    try:
        events = read_events(r=registry.redis, log=log, count=count, start=start, end=end)
    except redis.exceptions.ResponseError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return {"session_code": state.code, "stream": log.key, "events": events}
