"""
State TypedDict for the Analyzer Agent graph.
"""

from typing import Literal, Optional, TypedDict

from veilsync.models import ContentPayload


class AnalyzerState(TypedDict):
    """
    Internal state for the Analyzer graph.
    """
    # Input
    payload: ContentPayload

    # Which request variant was actually issued ("text" or "image")
    variant: Optional[Literal["text", "image"]]

    # Raw model output, parsed after the graph finishes
    raw_response: Optional[str]
