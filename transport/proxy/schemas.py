"""
AI Proxy Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the JSON contract between clients and the /api/gemini endpoint.
Field names match the wire format, hence the camelCase.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# REQUEST (INPUT)
# ============================================================================

class AskRequest(BaseModel):
    """Question body POSTed by clients."""

    question: Optional[str] = Field(None, description="Farmer's question, non-blank")
    imageBase64: Optional[str] = Field(
        None,
        description="Base64 JPEG. Selects the image-analysis template when present."
    )

    model_config = ConfigDict(extra="ignore")


# ============================================================================
# RESPONSES (OUTPUT)
# ============================================================================

class AnswerMetadata(BaseModel):
    model: str
    timestamp: str  # ISO-8601 UTC


class AskResponse(BaseModel):
    """Successful answer."""

    success: Literal[True] = True
    answer: str
    metadata: AnswerMetadata


class ErrorResponse(BaseModel):
    """
    Failure body.

    `status` mirrors the HTTP status; `kind` names the failure so clients
    can decide on retries without reading `error`.
    """

    error: str
    status: Optional[int] = None
    kind: Optional[str] = None
