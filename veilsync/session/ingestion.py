"""
Content ingestion: turns pasted text or an uploaded file into a payload.

Files are classified by declared media type: ``image/*`` becomes an
ImagePayload, anything else is decoded as UTF-8 text.
"""

import base64
import binascii
import logging

from veilsync.errors import InputError
from veilsync.models import ContentPayload, ImagePayload, TextPayload

logger = logging.getLogger(__name__)

PASTED_CONTENT_NAME = "Pasted Content"


def is_image_type(mime_type: str) -> bool:
    return (mime_type or "").lower().startswith("image/")


def payload_from_text(text: str) -> TextPayload:
    """Wrap pasted text. Empty text is an input error."""
    if not text:
        raise InputError("No content provided.")
    return TextPayload(text=text, source_name=PASTED_CONTENT_NAME)


def payload_from_file(name: str, mime_type: str, data: bytes) -> ContentPayload:
    """Build a payload from raw file bytes."""
    if is_image_type(mime_type):
        if not data:
            raise InputError(f"Error reading image file: {name}")
        encoded = base64.b64encode(data).decode("ascii")
        return ImagePayload(
            base64=encoded,
            mime_type=mime_type,
            display_name=name,
            data_uri=f"data:{mime_type};base64,{encoded}",
        )

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning("Could not decode %s as UTF-8: %s", name, e)
        raise InputError(f"Error reading text file: {name}") from e
    if not text:
        raise InputError(f"Error reading text file: {name}")
    return TextPayload(text=text, source_name=name)


def payload_from_upload(name: str, mime_type: str, data_b64: str) -> ContentPayload:
    """Build a payload from a base64-encoded upload (as sent over the socket)."""
    kind = "image" if is_image_type(mime_type) else "text"
    try:
        data = base64.b64decode(data_b64 or "", validate=True)
    except (binascii.Error, ValueError) as e:
        raise InputError(f"Error reading {kind} file: {name}") from e
    return payload_from_file(name, mime_type, data)
