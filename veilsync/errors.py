"""
Error types shared by the sync simulator, the analyzer and the session layer.

Command handlers translate these into WebSocket events; none of them is
fatal to the connection.
"""

ANALYSIS_FAILED_MESSAGE = (
    "Analysis failed. The AI core might be offline or the data payload is corrupted."
)


class VeilSyncError(Exception):
    """Base class for all application errors."""


class InputError(VeilSyncError):
    """No usable payload was supplied (or the supplied file could not be read)."""


class RunAlreadyActiveError(VeilSyncError):
    """A sync run was requested while another one is still in flight."""


class AuthenticationError(VeilSyncError):
    """Login rejected or command requires an authenticated session."""


class AnalysisInFlightError(VeilSyncError):
    """An analysis was requested while a previous request is still pending."""


class AnalysisError(VeilSyncError):
    """
    Opaque analysis failure.

    Transport errors, malformed JSON and schema violations all collapse into
    this one error. ``detail`` keeps the underlying reason for the logs;
    ``str(error)`` is the user-facing message.
    """

    def __init__(self, detail: str = ""):
        super().__init__(ANALYSIS_FAILED_MESSAGE)
        self.detail = detail


class UpdateCheckError(VeilSyncError):
    """The revision endpoint returned an unusable reply. Logged, never surfaced."""
