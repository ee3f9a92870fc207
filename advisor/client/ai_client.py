"""
AI Client Request Wrapper

The only entry points the UI layer calls to get an answer for a question.
Talks to the proxy endpoint over HTTP, retries transient failures with
exponential backoff, and never raises to its caller.

Two result shapes:
- AIClient.ask(...) -> AIResult   (tagged: success | failure)
- get_ai_response / get_ai_response_with_image -> str   (display text)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Literal, Optional

import httpx

from config import Config
from inference.types import ErrorKind

from .errors import AIRequestError, error_from_response
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)

API_KEY_MESSAGE = "Error: API key not configured. Please contact administrator."
NETWORK_MESSAGE = "Network error. Please check your internet connection and try again."
EMPTY_QUESTION_MESSAGE = "Please enter a question."


def display_text(error: AIRequestError, image: bool = False) -> str:
    """Human-readable fallback shown in place of an answer."""
    if error.kind in (ErrorKind.AUTH, ErrorKind.CONFIGURATION):
        return API_KEY_MESSAGE
    if error.kind == ErrorKind.VALIDATION:
        return EMPTY_QUESTION_MESSAGE
    if image:
        return f"Unable to analyze image at this time. Error: {error.message}"
    if error.kind == ErrorKind.NETWORK:
        return NETWORK_MESSAGE
    return (
        f"Unable to get AI response at this time. Error: {error.message}. "
        "Please try asking your question again later."
    )


@dataclass(frozen=True)
class AIResult:
    """Outcome of one question: the answer, or the text to show instead."""

    kind: Literal["success", "failure"]
    value: str
    error: Optional[AIRequestError] = None

    @property
    def ok(self) -> bool:
        return self.kind == "success"

    @classmethod
    def success(cls, answer: str) -> "AIResult":
        return cls(kind="success", value=answer)

    @classmethod
    def failure(cls, error: AIRequestError, image: bool = False) -> "AIResult":
        return cls(kind="failure", value=display_text(error, image=image), error=error)


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class AIClient:
    """
    Proxy-backed question client.

    Usage:
        client = AIClient()
        text = await client.get_ai_response("How to increase wheat yield?")

    Guarantees:
    - Never raises (cancellation of the awaiting task excepted)
    - Blank questions never reach the network
    - Only transient and network failures are retried
    - Each call owns its own retry counter and delay
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        retries: Optional[int] = None,
        delay: Optional[float] = None,
        timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint or Config.AI_API_ENDPOINT
        self.retries = Config.AI_RETRIES if retries is None else retries
        self.delay = Config.AI_RETRY_DELAY_S if delay is None else delay
        self.timeout = Config.AI_TIMEOUT_S if timeout is None else timeout
        self._sleep = sleep
        self._transport = transport

    async def _attempt(self, body: Dict[str, Any]) -> str:
        """One POST to the proxy. Raises AIRequestError on any failure."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=body)
        except httpx.RequestError as e:
            raise AIRequestError(ErrorKind.NETWORK, f"Network request failed ({type(e).__name__})")

        if not 200 <= response.status_code < 300:
            raise error_from_response(response.status_code, _json_or_empty(response))

        data = _json_or_empty(response)
        answer = data.get("answer")
        if data.get("success") and isinstance(answer, str) and answer.strip():
            return answer.strip()

        raise AIRequestError(ErrorKind.NO_CONTENT, "No response generated from AI", response.status_code)

    async def ask(self, question: str, image_base64: Optional[str] = None) -> AIResult:
        """
        Ask a question and get a tagged result.

        Args:
            question: The farmer's question; surrounding whitespace is dropped.
            image_base64: Optional base64 image for crop/farm image analysis.

        Returns:
            AIResult.success(answer) or AIResult.failure(error) whose value is
            the display text for that error.
        """
        image = bool(image_base64)
        text = (question or "").strip()
        if not text:
            return AIResult.failure(
                AIRequestError(ErrorKind.VALIDATION, "Question is required"), image=image
            )

        body: Dict[str, Any] = {"question": text}
        if image:
            body["imageBase64"] = image_base64

        try:
            answer = await retry_with_backoff(
                lambda: self._attempt(body),
                retries=self.retries,
                delay=self.delay,
                sleep=self._sleep,
            )
        except AIRequestError as e:
            logger.error(
                f"AI request failed: {e.message}",
                extra={"kind": e.kind.value, "status_code": e.status_code, "image": image},
            )
            return AIResult.failure(e, image=image)
        except Exception as e:
            logger.error(f"Unexpected error getting AI response: {e}", exc_info=True)
            return AIResult.failure(AIRequestError(ErrorKind.UPSTREAM, str(e)), image=image)

        return AIResult.success(answer)

    async def get_ai_response(self, question: str) -> str:
        """Answer text, or fallback text on failure."""
        return (await self.ask(question)).value

    async def get_ai_response_with_image(self, question: str, image_base64: str) -> str:
        """Answer text for a question about an image, or fallback text on failure."""
        return (await self.ask(question, image_base64=image_base64)).value


_default_client: Optional[AIClient] = None


def get_default_client() -> AIClient:
    """Get or create the AIClient configured from Config (singleton)."""
    global _default_client
    if _default_client is None:
        _default_client = AIClient()
    return _default_client


async def get_ai_response(question: str) -> str:
    return await get_default_client().get_ai_response(question)


async def get_ai_response_with_image(question: str, image_base64: str) -> str:
    return await get_default_client().get_ai_response_with_image(question, image_base64)
