"""
Stage Simulator - replays the scripted sync narrative against a payload.

Each stage goes through two phases on the log store:
  1. appended as "pending"
  2. after the registration delay, swapped for a copy with its terminal status
followed by the stage's own delay before the next stage starts.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from veilsync.errors import InputError, RunAlreadyActiveError
from veilsync.models import ContentPayload, LogEntry
from veilsync.sync.log_store import LogStore
from veilsync.sync.stages import (
    REGISTRATION_DELAY_MS,
    Stage,
    build_stage_script,
    persistence_message,
)
from veilsync.utils.id_generator import generate_run_id

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class RunResult:
    """Outcome of one run: the terminal entry for each stage, in script order."""
    run_id: str
    entries: List[LogEntry] = field(default_factory=list)
    completed: bool = False


class RunHandle:
    """Handle on an in-flight run."""

    def __init__(self, run_id: str, task: "asyncio.Task[RunResult]"):
        self.run_id = run_id
        self._task = task

    @property
    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> None:
        """Abort the run. Entries already committed stay in the log."""
        self._task.cancel()

    async def wait(self) -> RunResult:
        return await self._task


class StageSimulator:
    """
    Drives a LogStore through the stage script.

    Only one run may be active at a time. The scripted "error" stage is
    display status only and never gates sequencing.
    """

    def __init__(
        self,
        log_store: LogStore,
        script_builder: Callable[[ContentPayload], List[Stage]] = build_stage_script,
        registration_delay_ms: int = REGISTRATION_DELAY_MS,
        time_scale: float = 1.0,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.log_store = log_store
        self.script_builder = script_builder
        self.registration_delay_ms = registration_delay_ms
        self.time_scale = time_scale
        self._sleep = sleep
        self._active: Optional[RunHandle] = None

    @property
    def is_running(self) -> bool:
        return self._active is not None and not self._active.done

    def run(
        self,
        payload: Optional[ContentPayload],
        persistent: bool = False,
        on_complete: Optional[Callable[[RunResult], None]] = None,
    ) -> RunHandle:
        """
        Start a run for ``payload``.

        Must be called from inside a running event loop. Raises InputError
        for a missing or empty payload and RunAlreadyActiveError while
        another run is in flight; neither touches the log store.
        """
        if payload is None or payload.is_empty():
            raise InputError("No content provided for sync.")
        if self.is_running:
            raise RunAlreadyActiveError(f"Run {self._active.run_id} is still active")

        stages = self.script_builder(payload)
        run_id = generate_run_id()

        self.log_store.clear()
        task = asyncio.get_running_loop().create_task(
            self._replay(run_id, stages, persistent, on_complete)
        )
        self._active = RunHandle(run_id, task)
        logger.info("Sync run %s started for %s (%d stages)", run_id, payload.display_name, len(stages))
        return self._active

    async def _pause(self, delay_ms: float) -> None:
        await self._sleep(delay_ms * self.time_scale / 1000)

    async def _replay(
        self,
        run_id: str,
        stages: List[Stage],
        persistent: bool,
        on_complete: Optional[Callable[[RunResult], None]],
    ) -> RunResult:
        result = RunResult(run_id=run_id)
        try:
            for stage in stages:
                pending = self.log_store.add(stage.message, "pending")

                await self._pause(self.registration_delay_ms)

                final = self.log_store.update_status(pending.id, stage.terminal_status)
                result.entries.append(final)
                logger.debug("Run %s stage committed: %s [%s]", run_id, stage.message, stage.terminal_status)

                await self._pause(stage.delay_ms)

            result.completed = True
            self.log_store.add(persistence_message(persistent), "info")
            logger.info("Sync run %s complete", run_id)
        except asyncio.CancelledError:
            logger.info("Sync run %s cancelled after %d stages", run_id, len(result.entries))
            raise
        finally:
            self._active = None

        if on_complete is not None:
            on_complete(result)
        return result
