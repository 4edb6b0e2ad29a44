"""
Session Module

Per-connection glue around the sync simulator and the analyzer:
1. SessionContext - payload, auth gate, sync/analysis orchestration
2. InactivityTimer - idle logout
3. UpdateChecker - revision polling with snooze
4. ingestion - text/file to payload conversion
"""

from veilsync.session.context import SessionContext
from veilsync.session.inactivity import ACTIVITY_SIGNALS, InactivityTimer
from veilsync.session.updates import UpdateChecker

__all__ = ["SessionContext", "InactivityTimer", "UpdateChecker", "ACTIVITY_SIGNALS"]
