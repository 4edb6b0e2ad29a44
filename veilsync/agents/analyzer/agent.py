"""
Analyzer Agent - structured Gemini analysis of a text or image payload.

Architecture:
1. Router - picks the request variant from the payload kind
2. Text Analysis - system instruction + payload text, text response schema
3. Image Analysis - instruction + inline image, image response schema

Exactly one model request is issued per analyze() call. The JSON reply is
classified by shape and then checked against the variant that was sent.
"""

import json
import logging
from typing import Any, Dict, Literal, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from langgraph.graph import END, START, StateGraph
from pydantic import ValidationError

from veilsync.agents.analyzer.prompts import (
    IMAGE_ANALYSIS_PROMPT,
    TEXT_ANALYSIS_SYSTEM_PROMPT,
    TEXT_ANALYSIS_USER_PROMPT,
)
from veilsync.agents.analyzer.schemas import (
    IMAGE_RESPONSE_SCHEMA,
    TEXT_RESPONSE_SCHEMA,
    AnalysisResult,
    ImageAnalysis,
    TextAnalysis,
)
from veilsync.agents.analyzer.state import AnalyzerState
from veilsync.errors import AnalysisError, InputError
from veilsync.models import ContentPayload
from veilsync.settings import settings

logger = logging.getLogger(__name__)


def parse_json_response(content: str) -> Dict[str, Any]:
    """
    Parse the model reply as a JSON object.

    Requests set response_mime_type="application/json", so the reply is
    parsed as-is. Anything that is not a JSON object raises AnalysisError.
    """
    try:
        data = json.loads(content or "")
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Malformed JSON from model: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def classify_result(data: Dict[str, Any]) -> AnalysisResult:
    """
    Classify a parsed reply by shape.

    A string ``description`` plus an array ``tags`` means an image analysis;
    everything else is validated as a text analysis.
    """
    try:
        if isinstance(data.get("description"), str) and isinstance(data.get("tags"), list):
            return ImageAnalysis.model_validate(data)
        return TextAnalysis.model_validate(data)
    except ValidationError as e:
        raise AnalysisError(f"Response failed schema validation: {e}") from e


def _response_text(message: Any) -> str:
    """Flatten a chat model reply into plain text."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


class AnalyzerAgent:
    """
    Analyzer implemented as a small LangGraph graph.

    The graph only chooses and issues the request; parsing and classification
    happen in analyze() so every failure collapses into AnalysisError.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        text_llm: Any = None,
        image_llm: Any = None,
    ):
        """
        Initialize the Analyzer Agent.

        Args:
            model: Gemini model name (defaults to settings.GEMINI_MODEL)
            temperature: Sampling temperature (defaults to settings.ANALYSIS_TEMPERATURE)
            text_llm / image_llm: Pre-built chat models exposing ``ainvoke``;
                when omitted they are built on first use, so a missing API key
                only fails analysis requests
        """
        self.model = model or settings.GEMINI_MODEL
        self.temperature = settings.ANALYSIS_TEMPERATURE if temperature is None else temperature

        self.text_llm = text_llm
        self.image_llm = image_llm

        self.graph = self._build_graph()

    def _build_llm(self, response_schema: Dict[str, Any]) -> ChatGoogleGenerativeAI:
        if not settings.GEMINI_API_KEY:
            raise AnalysisError("GEMINI_API_KEY is not configured")
        try:
            return ChatGoogleGenerativeAI(
                model=self.model,
                temperature=self.temperature,
                google_api_key=settings.GEMINI_API_KEY,
                response_mime_type="application/json",
                response_schema=response_schema,
            )
        except ValueError as e:
            raise AnalysisError(f"Could not create Gemini client: {e}") from e

    def _get_text_llm(self):
        if self.text_llm is None:
            self.text_llm = self._build_llm(TEXT_RESPONSE_SCHEMA)
        return self.text_llm

    def _get_image_llm(self):
        if self.image_llm is None:
            self.image_llm = self._build_llm(IMAGE_RESPONSE_SCHEMA)
        return self.image_llm

    # =========================================================================
    # GRAPH NODES
    # =========================================================================
    @staticmethod
    def _route_payload(state: AnalyzerState) -> Literal["text_analysis", "image_analysis"]:
        return "image_analysis" if state["payload"].kind == "image" else "text_analysis"

    async def _text_analysis_node(self, state: AnalyzerState) -> dict:
        payload = state["payload"]
        logger.info("Requesting text analysis (%d chars)", len(payload.text))

        response = await self._get_text_llm().ainvoke([
            SystemMessage(content=TEXT_ANALYSIS_SYSTEM_PROMPT),
            HumanMessage(content=TEXT_ANALYSIS_USER_PROMPT.format(text=payload.text)),
        ])
        return {"variant": "text", "raw_response": _response_text(response)}

    async def _image_analysis_node(self, state: AnalyzerState) -> dict:
        payload = state["payload"]
        logger.info("Requesting image analysis for %s (%s)", payload.display_name, payload.mime_type)

        response = await self._get_image_llm().ainvoke([
            HumanMessage(content=[
                {"type": "text", "text": IMAGE_ANALYSIS_PROMPT},
                {"type": "image_url", "image_url": f"data:{payload.mime_type};base64,{payload.base64}"},
            ])
        ])
        return {"variant": "image", "raw_response": _response_text(response)}

    def _build_graph(self):
        workflow = StateGraph(AnalyzerState)

        workflow.add_node("text_analysis", self._text_analysis_node)
        workflow.add_node("image_analysis", self._image_analysis_node)

        workflow.add_conditional_edges(
            START,
            self._route_payload,
            {
                "text_analysis": "text_analysis",
                "image_analysis": "image_analysis",
            }
        )
        workflow.add_edge("text_analysis", END)
        workflow.add_edge("image_analysis", END)

        return workflow.compile()

    # =========================================================================
    # PUBLIC INTERFACE
    # =========================================================================
    async def analyze(self, payload: Optional[ContentPayload]) -> AnalysisResult:
        """
        Analyze ``payload`` and return a TextAnalysis or ImageAnalysis.

        Raises:
            InputError: no payload (raised before any request is made)
            AnalysisError: transport failure, malformed JSON, schema violation,
                or a reply whose shape does not match the request variant
        """
        if payload is None or payload.is_empty():
            raise InputError("No content provided for analysis.")

        try:
            final_state = await self.graph.ainvoke({
                "payload": payload,
                "variant": None,
                "raw_response": None,
            })
        except AnalysisError as e:
            logger.error("Analysis unavailable: %s", e.detail)
            raise
        except Exception as e:
            logger.error("Analysis request failed: %s", e)
            raise AnalysisError(f"Request failed: {e}") from e

        data = parse_json_response(final_state.get("raw_response") or "")
        result = classify_result(data)

        variant = final_state.get("variant")
        if result.kind != variant:
            raise AnalysisError(f"Expected a {variant} analysis but the reply looked like {result.kind}")

        logger.info("Analysis complete (%s)", result.kind)
        return result
