"""
Shared fakes for the test suite.

FakeChatModel stands in for ChatGoogleGenerativeAI: it records every
``ainvoke`` call and replays canned replies (or raises canned errors).
"""

import asyncio
import json

import httpx
import pytest
from langchain_core.messages import AIMessage

from veilsync.models import ImagePayload, TextPayload

TEXT_REPLY = json.dumps({
    "dataType": "Text Log",
    "summary": "A faint greeting pulses through the grid.",
    "risks": ["Plaintext"],
})

IMAGE_REPLY = json.dumps({
    "description": "A neon-lit alley drenched in rain.",
    "tags": ["neon", "rain", "alley"],
    "anomaly": "None detected",
})


class FakeChatModel:
    def __init__(self, *replies, gate: "asyncio.Event | None" = None):
        self.replies = list(replies)
        self.calls = []
        self.gate = gate

    async def ainvoke(self, messages, *args, **kwargs):
        self.calls.append(messages)
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return AIMessage(content=reply)


def commit_transport(*shas, status_code=200):
    """MockTransport answering the commits endpoint with the given shas in turn."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        sha = shas[min(len(calls), len(shas)) - 1]
        return httpx.Response(status_code, json={"sha": sha})

    transport = httpx.MockTransport(handler)
    transport.calls = calls
    return transport


async def drain_events(emitter, timeout: float = 0.05):
    """Collect every event currently queued on ``emitter``."""
    events = []
    while True:
        try:
            event = await asyncio.wait_for(emitter.get(), timeout)
        except asyncio.TimeoutError:
            return events
        events.append(event.to_dict())


@pytest.fixture
def text_payload():
    return TextPayload(text="hello world")


@pytest.fixture
def image_payload():
    return ImagePayload(
        base64="iVBORw0KGgo=",
        mime_type="image/png",
        display_name="skyline.png",
        data_uri="data:image/png;base64,iVBORw0KGgo=",
    )
