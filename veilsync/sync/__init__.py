"""
Sync Module

Scripted, purely illustrative "data synchronization":
1. LogStore - append-only log rendered by the client
2. Stage script - the fixed nine-step narrative
3. StageSimulator - replays the script with two-phase status transitions
"""

from veilsync.sync.log_store import LogStore
from veilsync.sync.simulator import RunHandle, RunResult, StageSimulator
from veilsync.sync.stages import Stage, build_stage_script

__all__ = ["LogStore", "RunHandle", "RunResult", "StageSimulator", "Stage", "build_stage_script"]
