"""
Session Context

Per-connection controller. Owns the current payload, the log store, the
sync simulator, the analysis state and the session timers (inactivity and
update polling), and tears all of them down when the connection ends.
"""

import asyncio
import logging
import secrets
from typing import Any, Callable, Dict, Optional

import httpx

from veilsync.errors import (
    AnalysisError,
    AnalysisInFlightError,
    AuthenticationError,
    InputError,
    RunAlreadyActiveError,
)
from veilsync.events import EventEmitter, EventType
from veilsync.models import ContentPayload
from veilsync.session.inactivity import InactivityTimer
from veilsync.session.ingestion import payload_from_text, payload_from_upload
from veilsync.session.updates import ALERT_SOUND_URI, UpdateChecker
from veilsync.settings import settings
from veilsync.sync.log_store import LogStore
from veilsync.sync.simulator import RunHandle, RunResult, StageSimulator
from veilsync.utils.id_generator import generate_session_id

logger = logging.getLogger(__name__)

LOGIN_MESSAGE = "Authentication successful. VeilSync protocol engaged."


class SessionContext:
    """
    Everything one browser session needs, with no process-wide timers.

    Mutating commands raise VeilSyncError subclasses on precondition
    failures and leave state untouched in that case.
    """

    def __init__(
        self,
        emitter: EventEmitter,
        analyzer: Any,
        access_code: Optional[str] = None,
        inactivity_timeout_seconds: Optional[float] = None,
        time_scale: Optional[float] = None,
        update_url: Optional[str] = None,
        update_interval_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Callable = asyncio.sleep,
    ):
        self.session_id = generate_session_id()
        self.emitter = emitter
        self.analyzer = analyzer
        self.access_code = settings.ACCESS_CODE if access_code is None else access_code

        self.log_store = LogStore()
        self.simulator = StageSimulator(
            self.log_store,
            time_scale=settings.SYNC_TIME_SCALE if time_scale is None else time_scale,
            sleep=sleep,
        )
        self.inactivity = InactivityTimer(
            settings.INACTIVITY_TIMEOUT_SECONDS if inactivity_timeout_seconds is None else inactivity_timeout_seconds,
            on_timeout=self._on_inactivity_timeout,
        )

        # Stand-in for browser sessionStorage
        self.storage: Dict[str, str] = {}
        update_kwargs = {"clock": clock} if clock is not None else {}
        self.updates = UpdateChecker(
            url=update_url or settings.UPDATE_CHECK_URL,
            on_update_available=self._on_update_available,
            interval_seconds=update_interval_seconds or settings.UPDATE_CHECK_INTERVAL_SECONDS,
            request_timeout_seconds=settings.UPDATE_REQUEST_TIMEOUT_SECONDS,
            storage=self.storage,
            client=http_client,
            **update_kwargs,
        )

        self.authenticated = False
        self.payload: Optional[ContentPayload] = None
        self.persistent = False
        self.sync_completed = False
        self.analysis_result = None
        self.analysis_error: Optional[str] = None

        self._run: Optional[RunHandle] = None
        self._analysis_task: Optional[asyncio.Task] = None
        # Bumped on every input reset and sync start so late analysis replies can be dropped
        self._payload_version = 0

        self.log_store.subscribe(self.emitter.emit_log_snapshot)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================
    def open(self, poll_updates: bool = True) -> None:
        if poll_updates:
            self.updates.start()
        logger.info("Session %s opened", self.session_id)

    async def close(self) -> None:
        """Cancel every timer and task owned by the session."""
        self.inactivity.cancel()
        if self._run is not None and not self._run.done:
            self._run.cancel()
        if self._analysis_task is not None and not self._analysis_task.done():
            self._analysis_task.cancel()
        await self.updates.aclose()
        self.log_store.unsubscribe(self.emitter.emit_log_snapshot)
        self.emitter.close()
        logger.info("Session %s closed", self.session_id)

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================
    def login(self, access_code: str = "") -> None:
        if self.access_code and not secrets.compare_digest(access_code or "", self.access_code):
            raise AuthenticationError("Invalid access code.")

        self.authenticated = True
        self._reset_input()
        self.log_store.add(LOGIN_MESSAGE, "success")
        self.inactivity.start()
        self.emitter.emit_simple(EventType.AUTHENTICATED, session_id=self.session_id)
        logger.info("Session %s authenticated", self.session_id)

    def logout(self, expired: bool = False) -> None:
        self.authenticated = False
        self.inactivity.cancel()
        if expired:
            self.emitter.emit_simple(EventType.SESSION_EXPIRED, "Session ended after inactivity.")
        else:
            self.emitter.emit_simple(EventType.LOGGED_OUT)
        logger.info("Session %s logged out%s", self.session_id, " (inactivity)" if expired else "")

    def _on_inactivity_timeout(self) -> None:
        if self.authenticated:
            self.logout(expired=True)

    def record_activity(self, signal: str) -> bool:
        return self.inactivity.record_activity(signal)

    def _require_auth(self) -> None:
        if not self.authenticated:
            raise AuthenticationError("Not authenticated.")

    # =========================================================================
    # INPUT
    # =========================================================================
    def _ensure_idle(self) -> None:
        if self.simulator.is_running:
            raise RunAlreadyActiveError("Input is locked while a sync is running.")

    def _reset_input(self) -> None:
        self.payload = None
        self.sync_completed = False
        self.analysis_result = None
        self.analysis_error = None
        self._payload_version += 1
        self.log_store.clear()
        self.emitter.emit_simple(EventType.INPUT_RESET)

    def _set_payload(self, payload: ContentPayload) -> None:
        self.payload = payload
        data = {"kind": payload.kind, "name": payload.display_name}
        if payload.kind == "image":
            data["data_uri"] = payload.data_uri
        else:
            data["size"] = payload.size_label
        self.emitter.emit_simple(EventType.PAYLOAD_SELECTED, **data)

    def select_text(self, text: str) -> Optional[ContentPayload]:
        self._require_auth()
        self._ensure_idle()
        payload = payload_from_text(text) if text else None
        self._reset_input()
        if payload is not None:
            self._set_payload(payload)
        return payload

    def select_file(self, name: str, mime_type: str, data_b64: str) -> ContentPayload:
        self._require_auth()
        self._ensure_idle()
        self._reset_input()
        try:
            payload = payload_from_upload(name, mime_type, data_b64)
        except InputError as e:
            self.log_store.add(str(e), "error")
            raise
        self._set_payload(payload)
        return payload

    def clear_input(self) -> None:
        self._require_auth()
        self._ensure_idle()
        self._reset_input()

    def set_persistence(self, enabled: bool) -> None:
        self._require_auth()
        self._ensure_idle()
        self.persistent = bool(enabled)

    # =========================================================================
    # SYNC
    # =========================================================================
    def start_sync(self) -> RunHandle:
        self._require_auth()
        if self.sync_completed and self.persistent:
            raise InputError("Sync already completed for this persistent session.")

        # Raises before touching any state when the preconditions fail
        self._run = self.simulator.run(self.payload, self.persistent, on_complete=self._on_sync_complete)

        self.sync_completed = False
        self.analysis_result = None
        self.analysis_error = None
        # A re-run invalidates any analysis still in flight for the previous one
        self._payload_version += 1
        self.emitter.emit_simple(EventType.SYNC_STARTED, run_id=self._run.run_id)
        return self._run

    def _on_sync_complete(self, result: RunResult) -> None:
        self.sync_completed = result.completed
        self.emitter.emit_simple(
            EventType.SYNC_COMPLETE,
            run_id=result.run_id,
            stages=len(result.entries),
        )

    # =========================================================================
    # ANALYSIS
    # =========================================================================
    @property
    def analysis_in_flight(self) -> bool:
        return self._analysis_task is not None and not self._analysis_task.done()

    def analyze(self) -> "asyncio.Task":
        """
        Start an analysis of the current payload; also the manual retry path.

        Only one request may be outstanding; a second call while one is in
        flight raises AnalysisInFlightError.
        """
        self._require_auth()
        if self.payload is None:
            raise InputError("No content provided for analysis.")
        if not self.sync_completed:
            raise InputError("Sync the payload before requesting analysis.")
        if self.analysis_in_flight:
            raise AnalysisInFlightError("An analysis request is already in flight.")

        self.analysis_result = None
        self.analysis_error = None
        self.emitter.emit_simple(EventType.ANALYSIS_STARTED)
        self._analysis_task = asyncio.get_running_loop().create_task(
            self._run_analysis(self.payload, self._payload_version)
        )
        return self._analysis_task

    async def _run_analysis(self, payload: ContentPayload, version: int) -> None:
        try:
            result = await self.analyzer.analyze(payload)
        except (AnalysisError, InputError) as e:
            logger.warning("Analysis failed: %s", getattr(e, "detail", "") or e)
            if version == self._payload_version:
                self.analysis_error = str(e)
                self.emitter.emit_simple(EventType.ANALYSIS_ERROR, str(e))
            return

        if version != self._payload_version:
            logger.info("Discarding analysis for a payload that is no longer selected")
            return
        self.analysis_result = result
        self.emitter.emit_analysis_result(result)

    # =========================================================================
    # UPDATES
    # =========================================================================
    def _on_update_available(self, revision: str) -> None:
        self.emitter.emit_simple(
            EventType.UPDATE_AVAILABLE,
            "A new version of VeilSync is available.",
            revision=revision,
            alert_sound=ALERT_SOUND_URI,
        )

    def snooze_updates(self, minutes: float) -> float:
        return self.updates.snooze(minutes)

    def update_now(self) -> None:
        self.emitter.emit_simple(EventType.RELOAD)
