"""
WebSocket Routes

Handles the WebSocket connection that drives one VeilSync session.
Delegates to:
- session/context.py for session state, timers and orchestration
- command_handlers.py for per-command processing
"""

import asyncio
import json
import logging
from functools import lru_cache
from typing import Callable

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from veilsync.agents.analyzer import AnalyzerAgent
from veilsync.command_handlers import dispatch_command
from veilsync.events import EventEmitter
from veilsync.session.context import SessionContext

logger = logging.getLogger(__name__)

router = APIRouter()

SessionFactory = Callable[[EventEmitter, AnalyzerAgent], SessionContext]


@lru_cache(maxsize=1)
def get_analyzer() -> AnalyzerAgent:
    """Shared analyzer; its Gemini clients are created on the first analysis request."""
    return AnalyzerAgent()


def get_session_factory() -> SessionFactory:
    return SessionContext


@router.websocket("/ws/sync")
async def websocket_endpoint(
    websocket: WebSocket,
    analyzer: AnalyzerAgent = Depends(get_analyzer),
    session_factory: SessionFactory = Depends(get_session_factory),
):
    await websocket.accept()

    # Create event emitter bound to this connection's loop
    emitter = EventEmitter()
    emitter.initialize(asyncio.get_running_loop())

    session = session_factory(emitter, analyzer)
    session.open()

    async def stream_events():
        while True:
            event = await emitter.get()
            await websocket.send_json(event.to_dict())

    stream_task = asyncio.create_task(stream_events())

    try:
        while True:
            # Wait for client command
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                emitter.emit_error("Malformed command: expected JSON")
                continue
            if not isinstance(message, dict):
                emitter.emit_error("Malformed command: expected a JSON object")
                continue

            await dispatch_command(session, message)

    except WebSocketDisconnect:
        logger.info("Client disconnected from session %s", session.session_id)
    finally:
        stream_task.cancel()
        await session.close()
