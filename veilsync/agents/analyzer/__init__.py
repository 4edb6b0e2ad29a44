"""
Analyzer Agent Module

Structured Gemini analysis of the synced payload:
1. Text payloads - data type, summary, up to 3 risk keywords
2. Image payloads - description, up to 5 tags, one anomaly
"""

from veilsync.agents.analyzer.agent import AnalyzerAgent, classify_result, parse_json_response
from veilsync.agents.analyzer.schemas import AnalysisResult, ImageAnalysis, TextAnalysis

__all__ = [
    "AnalyzerAgent",
    "AnalysisResult",
    "ImageAnalysis",
    "TextAnalysis",
    "classify_result",
    "parse_json_response",
]
