from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List, Literal

ModelStatus = Literal["success", "recoverable_error", "fatal_error"]


class ErrorKind(str, Enum):
    """Closed set of failure kinds shared by the proxy and the client."""

    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    AUTH = "auth"
    TRANSIENT = "transient"
    MALFORMED_REQUEST = "malformed_request"
    NO_CONTENT = "no_content"
    NETWORK = "network"
    UPSTREAM = "upstream"

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.TRANSIENT, ErrorKind.NETWORK)


@dataclass(frozen=True)
class GenerationConfig:
    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 1024

    def to_payload(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "topK": self.top_k,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
        }


@dataclass(frozen=True)
class ImagePart:
    data: str                  # base64, no data: URL prefix
    mime_type: str = "image/jpeg"


@dataclass
class PromptRequest:
    text: str                  # persona framing + question
    image: Optional[ImagePart] = None
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    def to_payload(self) -> Dict[str, Any]:
        """Render the generateContent request body."""
        parts: List[Dict[str, Any]] = [{"text": self.text}]
        if self.image is not None:
            parts.append({
                "inline_data": {
                    "mime_type": self.image.mime_type,
                    "data": self.image.data,
                }
            })
        return {
            "contents": [{"parts": parts}],
            "generationConfig": self.generation.to_payload(),
        }


@dataclass
class UpstreamResult:
    status: ModelStatus
    output: Optional[str] = None
    status_code: Optional[int] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"
