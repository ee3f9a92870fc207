"""
AI Proxy Request Handler

Turns one question payload into one (status_code, body) pair.
No FastAPI imports. Never raises.

Flow:
1. Validate question (400, no upstream call)
2. Check the server credential (500, generic message)
3. Build PromptRequest (text-only or image template)
4. backend.generate()
5. Normalize success / failure into the JSON contract
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError

from advisor.prompting import build_prompt_request
from inference import ErrorKind, ModelBackend, UpstreamResult

from .schemas import AnswerMetadata, AskRequest, AskResponse, ErrorResponse

logger = logging.getLogger(__name__)

QUESTION_REQUIRED = "Question is required"
CONFIGURATION_ERROR = "Server configuration error. Please contact the administrator."
NO_CONTENT_ERROR = "No response generated from AI"
UNREACHABLE_ERROR = "Upstream AI service unreachable"
GENERIC_UPSTREAM_ERROR = "Failed to get AI response"
INTERNAL_ERROR = "Internal server error"


@dataclass
class ProxyResponse:
    status_code: int
    body: Dict[str, Any]


def _error(status_code: int, message: str, kind: Optional[ErrorKind] = None) -> ProxyResponse:
    body = ErrorResponse(
        error=message,
        status=status_code,
        kind=kind.value if kind else None,
    )
    return ProxyResponse(status_code, body.model_dump(exclude_none=True))


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse(payload: Any) -> Optional[AskRequest]:
    """Return the request, or None when it carries no usable question."""
    if not isinstance(payload, dict):
        return None
    try:
        request = AskRequest.model_validate(payload)
    except ValidationError:
        return None
    if not request.question or not request.question.strip():
        return None
    return request


def _failure(result: UpstreamResult) -> ProxyResponse:
    kind = result.error_kind or ErrorKind.UPSTREAM

    if kind == ErrorKind.CONFIGURATION:
        return _error(500, CONFIGURATION_ERROR, kind)
    if kind == ErrorKind.NO_CONTENT:
        return _error(500, NO_CONTENT_ERROR, kind)
    if kind == ErrorKind.NETWORK and result.status_code is None:
        return _error(502, UNREACHABLE_ERROR, kind)

    return _error(
        result.status_code or 500,
        result.error_message or GENERIC_UPSTREAM_ERROR,
        kind,
    )


def handle_question(payload: Any, backend: ModelBackend) -> ProxyResponse:
    """
    Answer one question through the model backend.

    Args:
        payload: Decoded JSON body (anything; validated here)
        backend: ModelBackend holding the upstream credential

    Returns:
        ProxyResponse with the HTTP status and JSON body to send
    """
    try:
        request = _parse(payload)
        if request is None:
            return ProxyResponse(400, {"error": QUESTION_REQUIRED})

        if not backend.configured:
            logger.error("GEMINI_API_KEY not set in environment variables")
            return _error(500, CONFIGURATION_ERROR, ErrorKind.CONFIGURATION)

        prompt = build_prompt_request(request.question, request.imageBase64)
        result = backend.generate(prompt)

        if not result.ok:
            response = _failure(result)
            logger.error(
                f"Upstream AI error: {response.status_code} - {response.body['error']}",
                extra={"status_code": response.status_code, "kind": response.body.get("kind")},
            )
            return response

        if not result.output or not result.output.strip():
            return _error(500, NO_CONTENT_ERROR, ErrorKind.NO_CONTENT)

        body = AskResponse(
            answer=result.output.strip(),
            metadata=AnswerMetadata(model=backend.model_name, timestamp=_timestamp()),
        )
        logger.info(
            "Question answered",
            extra={"image": prompt.image is not None, "answer_length": len(body.answer)},
        )
        return ProxyResponse(200, body.model_dump())

    except Exception as e:
        logger.error(f"Server error: {type(e).__name__}", exc_info=True)
        return _error(500, INTERNAL_ERROR)
