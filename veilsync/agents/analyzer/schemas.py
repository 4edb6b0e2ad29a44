"""
Pydantic schemas for Analyzer Agent outputs, plus the JSON response schemas
sent to Gemini with each request variant.
"""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

NO_ANOMALY = "None detected"


class TextAnalysis(BaseModel):
    """Analysis of a text payload."""
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["text"] = "text"
    data_type: str = Field(..., alias="dataType", description="The type of data, e.g., JSON, JavaScript Code, Text Log, Article")
    summary: str = Field(..., description="One-sentence summary in a cyberpunk tone")
    risks: List[str] = Field(default_factory=list, max_length=3, description="Up to 3 security keywords or notable patterns")


class ImageAnalysis(BaseModel):
    """Analysis of an image payload."""
    kind: Literal["image"] = "image"
    description: str = Field(..., description="One-sentence description of the image in a cyberpunk tone")
    tags: List[str] = Field(default_factory=list, max_length=5, description="Up to 5 keywords for objects and themes")
    anomaly: str = Field(NO_ANOMALY, description="Anomaly or point of interest, or 'None detected'")


AnalysisResult = Annotated[Union[TextAnalysis, ImageAnalysis], Field(discriminator="kind")]


# =============================================================================
# RESPONSE SCHEMAS (sent as response_schema on the Gemini request)
# =============================================================================

TEXT_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "dataType": {
            "type": "string",
            "description": "The type of data, e.g., JSON, JavaScript Code, Text Log, Article.",
        },
        "summary": {
            "type": "string",
            "description": "A concise, one-sentence summary of the content in a cyberpunk tone.",
        },
        "risks": {
            "type": "array",
            "description": 'Up to 3 potential security keywords or notable patterns found (e.g., "API Key", "Password", "Private Data").',
            "items": {"type": "string"},
        },
    },
    "required": ["dataType", "summary", "risks"],
}

IMAGE_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "description": {
            "type": "string",
            "description": "A concise, one-sentence description of the image in a cyberpunk tone.",
        },
        "tags": {
            "type": "array",
            "description": "Up to 5 relevant keywords or tags identifying objects and themes in the image.",
            "items": {"type": "string"},
        },
        "anomaly": {
            "type": "string",
            "description": f'A potential anomaly or point of interest found in the image. If none, state "{NO_ANOMALY}".',
        },
    },
    "required": ["description", "tags", "anomaly"],
}
