"""
WebSocket Command Handlers

One handler per client command type:
- login / logout / activity: authentication gate and idle tracking
- select_text / select_file / clear_input / set_persistence: input panel
- start_sync: scripted sync run
- analyze: structured analysis (also the retry action)
- update_now / snooze: update notification actions
"""

import logging
from typing import Any, Awaitable, Callable, Dict

from veilsync.errors import AnalysisInFlightError, InputError, RunAlreadyActiveError, VeilSyncError
from veilsync.session.context import SessionContext

logger = logging.getLogger(__name__)

Handler = Callable[[SessionContext, Dict[str, Any]], Awaitable[None]]


def _str_field(message: dict, name: str, default: str = "") -> str:
    """Read an optional string field; null counts as missing, other types are rejected."""
    value = message.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InputError(f"Field '{name}' must be a string.")
    return value


async def handle_login(session: SessionContext, message: dict) -> None:
    session.login(_str_field(message, "access_code"))


async def handle_logout(session: SessionContext, message: dict) -> None:
    session.logout()


async def handle_activity(session: SessionContext, message: dict) -> None:
    session.record_activity(_str_field(message, "signal"))


async def handle_select_text(session: SessionContext, message: dict) -> None:
    session.select_text(_str_field(message, "text"))


async def handle_select_file(session: SessionContext, message: dict) -> None:
    session.select_file(
        name=_str_field(message, "name") or "unnamed",
        mime_type=_str_field(message, "mime_type") or "application/octet-stream",
        data_b64=_str_field(message, "data"),
    )


async def handle_clear_input(session: SessionContext, message: dict) -> None:
    session.clear_input()


async def handle_set_persistence(session: SessionContext, message: dict) -> None:
    enabled = message.get("enabled", False)
    if not isinstance(enabled, bool):
        raise InputError("Field 'enabled' must be true or false.")
    session.set_persistence(enabled)


async def handle_start_sync(session: SessionContext, message: dict) -> None:
    session.start_sync()


async def handle_analyze(session: SessionContext, message: dict) -> None:
    session.analyze()


async def handle_update_now(session: SessionContext, message: dict) -> None:
    session.update_now()


async def handle_snooze(session: SessionContext, message: dict) -> None:
    try:
        minutes = float(message.get("minutes", 10))
    except (TypeError, ValueError):
        minutes = 10
    session.snooze_updates(minutes)


COMMAND_HANDLERS: Dict[str, Handler] = {
    "login": handle_login,
    "logout": handle_logout,
    "activity": handle_activity,
    "select_text": handle_select_text,
    "select_file": handle_select_file,
    "clear_input": handle_clear_input,
    "set_persistence": handle_set_persistence,
    "start_sync": handle_start_sync,
    "analyze": handle_analyze,
    "update_now": handle_update_now,
    "snooze": handle_snooze,
}


async def dispatch_command(session: SessionContext, message: dict) -> None:
    """
    Route one decoded client message to its handler.

    Concurrency rejections are logged only (the client disables those
    controls); every other application error becomes an ``error`` event.
    """
    command = message.get("type", "")
    if not isinstance(command, str):
        command = ""
    handler = COMMAND_HANDLERS.get(command)
    if handler is None:
        session.emitter.emit_error(f"Unknown command: {command!r}", command=command or None)
        return

    try:
        await handler(session, message)
    except (RunAlreadyActiveError, AnalysisInFlightError) as e:
        logger.info("Ignoring %s: %s", command, e)
    except VeilSyncError as e:
        logger.info("Command %s rejected: %s", command, e)
        session.emitter.emit_error(str(e), command=command)
