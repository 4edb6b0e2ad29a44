"""
The scripted narrative replayed by every sync run.
"""

from dataclasses import dataclass
from typing import List

from veilsync.models import ContentPayload, TerminalStatus

# Pause between showing a stage as pending and committing its outcome
REGISTRATION_DELAY_MS = 200

PERSISTENCE_ENABLED_MESSAGE = "SESSION PERSISTENCE ENABLED."
PERSISTENCE_DISABLED_MESSAGE = "SESSION PERSISTENCE DISABLED. CLEARING INPUT ON NEXT ACTION."


@dataclass(frozen=True)
class Stage:
    """One scripted step: message, post-delay and the status it settles on."""
    message: str
    delay_ms: int
    terminal_status: TerminalStatus


def build_stage_script(payload: ContentPayload) -> List[Stage]:
    """
    Build the fixed nine-stage script for ``payload``.

    The "SYNC FAILED" stage is narrative only: its error status never stops
    the run.
    """
    return [
        Stage("INITIALIZING PHANTOM_V RUNTIME", 1000, "info"),
        Stage(f"PROCESSING DATA: {payload.display_name}", 1000, "info"),
        Stage("ESTABLISHING SECURE CONNECTION", 1500, "info"),
        Stage("ANALYZING DATA STRUCTURE", 1200, "info"),
        Stage("ATTEMPTING KERNEL-LEVEL SYNC", 2000, "info"),
        Stage("SYNC FAILED: ACCESS RESTRICTED.", 800, "error"),
        Stage("FALLBACK TO PAYLOAD INJECTION", 1500, "info"),
        Stage(f"SUCCESS: {payload.size_label} SYNCED.", 1000, "success"),
        Stage("SYNC COMPLETE. STANDBY.", 500, "success"),
    ]


def persistence_message(enabled: bool) -> str:
    return PERSISTENCE_ENABLED_MESSAGE if enabled else PERSISTENCE_DISABLED_MESSAGE
