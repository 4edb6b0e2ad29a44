"""
Core data model: log entries and content payloads.

Pydantic models are used so the same objects serialize straight onto the
WebSocket. Log entries are frozen; a status change always produces a copy.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from veilsync.utils.id_generator import generate_log_id

LogStatus = Literal["pending", "success", "error", "info"]
TerminalStatus = Literal["success", "error", "info"]


class LogEntry(BaseModel):
    """A single line in the sync log viewer."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_log_id)
    message: str
    status: LogStatus = "pending"

    def with_status(self, status: LogStatus) -> "LogEntry":
        """Return a copy bearing ``status``; id and message are preserved."""
        return self.model_copy(update={"status": status})


class TextPayload(BaseModel):
    """Raw text selected by the user (pasted or read from a text file)."""
    kind: Literal["text"] = "text"
    text: str
    source_name: str = "Pasted Content"

    @property
    def display_name(self) -> str:
        return self.source_name

    @property
    def size_label(self) -> str:
        return f"{len(self.text)} chars"

    def is_empty(self) -> bool:
        return not self.text


class ImagePayload(BaseModel):
    """An image file; kept both as a data URI (for preview) and raw base64."""
    kind: Literal["image"] = "image"
    base64: str
    mime_type: str
    display_name: str
    data_uri: Optional[str] = None

    @property
    def size_label(self) -> str:
        return "Image Data"

    def is_empty(self) -> bool:
        return not self.base64


ContentPayload = Union[TextPayload, ImagePayload]
