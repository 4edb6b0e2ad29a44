"""
Event Emitter for real-time streaming of session events to WebSocket.
Uses asyncio Queue to decouple the sync/analysis work from WebSocket streaming.
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from veilsync.models import LogEntry


class EventType(Enum):
    AUTHENTICATED = "authenticated"
    LOGGED_OUT = "logged_out"
    SESSION_EXPIRED = "session_expired"  # Inactivity timeout fired
    PAYLOAD_SELECTED = "payload_selected"
    INPUT_RESET = "input_reset"
    LOG_SNAPSHOT = "log_snapshot"        # Full log contents after every mutation
    SYNC_STARTED = "sync_started"
    SYNC_COMPLETE = "sync_complete"
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_RESULT = "analysis_result"
    ANALYSIS_ERROR = "analysis_error"
    UPDATE_AVAILABLE = "update_available"
    RELOAD = "reload"
    ERROR = "error"


@dataclass
class SessionEvent:
    """Represents a single event pushed to the client."""
    type: EventType
    content: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {"type": self.type.value}
        if self.content:
            result["content"] = self.content
        result.update(self.data)
        return result


class EventEmitter:
    """
    Thread-safe event emitter using asyncio Queue.
    Producers push events synchronously, WebSocket consumes asynchronously.
    """

    def __init__(self):
        self._queue: Optional[asyncio.Queue] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._closed: bool = False  # Flag to stop accepting events

    def initialize(self, loop: asyncio.AbstractEventLoop):
        """Initialize with the event loop (call from async context)."""
        self._loop = loop
        self._queue = asyncio.Queue()
        self._closed = False

    def close(self):
        """Mark emitter as closed. Future emit() calls will be no-ops."""
        self._closed = True
        self._queue = None
        self._loop = None

    def emit(self, event: SessionEvent):
        """Emit event if emitter is available and not closed."""
        if self._closed:
            return

        if self._queue is None or self._loop is None:
            return

        # Thread-safe way to put item in queue from sync context
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            # Loop may be closed
            pass

    async def get(self) -> SessionEvent:
        """Get next event from queue (async)."""
        if self._queue is None:
            raise RuntimeError("EventEmitter not initialized")
        return await self._queue.get()

    def emit_simple(self, event_type: EventType, content: str = "", **data):
        """Convenience method for events carrying only a message and flat fields."""
        self.emit(SessionEvent(type=event_type, content=content, data=data))

    def emit_log_snapshot(self, entries: List[LogEntry]):
        """Send the full ordered log so the client can re-render."""
        self.emit(SessionEvent(
            type=EventType.LOG_SNAPSHOT,
            data={"logs": [entry.model_dump() for entry in entries]}
        ))

    def emit_analysis_result(self, result):
        self.emit(SessionEvent(
            type=EventType.ANALYSIS_RESULT,
            data={"result": result.model_dump(by_alias=True)}
        ))

    def emit_error(self, content: str, command: Optional[str] = None):
        data = {"command": command} if command else {}
        self.emit(SessionEvent(type=EventType.ERROR, content=content, data=data))
