import logging
from typing import Any, Dict, Optional

import requests

from .base import ModelBackend
from .types import ErrorKind, PromptRequest, UpstreamResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# google.rpc status values and ErrorInfo reasons that mean the credential was rejected
_AUTH_RPC_STATUSES = {"UNAUTHENTICATED", "PERMISSION_DENIED"}
_AUTH_REASONS = {"API_KEY_INVALID", "API_KEY_SERVICE_BLOCKED", "API_KEY_HTTP_REFERRER_BLOCKED"}
_TRANSIENT_STATUS_CODES = {429, 503}


def classify_upstream_error(status_code: int, error: Dict[str, Any]) -> ErrorKind:
    """
    Map an upstream non-2xx response to an ErrorKind.

    Gemini reports an invalid key as 400 INVALID_ARGUMENT with an
    API_KEY_INVALID reason, so the body is inspected before the status family.
    """
    if status_code in _TRANSIENT_STATUS_CODES:
        return ErrorKind.TRANSIENT

    reasons = {
        d.get("reason")
        for d in error.get("details", []) or []
        if isinstance(d, dict)
    }
    if (
        status_code in (401, 403)
        or error.get("status") in _AUTH_RPC_STATUSES
        or reasons & _AUTH_REASONS
    ):
        return ErrorKind.AUTH

    if 400 <= status_code < 500:
        return ErrorKind.MALFORMED_REQUEST
    return ErrorKind.UPSTREAM


def extract_text(data: Dict[str, Any]) -> Optional[str]:
    """First text part of the first candidate, or None."""
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class GeminiModelBackend(ModelBackend):
    """
    Google Gemini backend using the REST generateContent method.

    The API key is sent as the `key` query parameter and is never logged;
    transport errors are reported by exception type only because their
    messages embed the request URL.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-pro",
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 30.0,
    ):
        """
        Initialize Gemini backend.

        Args:
            api_key:    Server-held credential (empty means unconfigured)
            model_name: Gemini model id, e.g. "gemini-pro"
            base_url:   API root up to and including the version segment
            timeout_s:  Transport timeout for one upstream call
        """
        self._api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:generateContent"

    def generate(self, request: PromptRequest) -> UpstreamResult:
        """
        POST the prompt upstream and fold the outcome into an UpstreamResult.

        Args:
            request: PromptRequest with framed text, optional image, generation config

        Returns:
            UpstreamResult; status "recoverable_error" for transient and
            network failures, "fatal_error" for everything else that failed
        """
        base_metadata = {"backend": "gemini", "model": self.model_name}

        if not self.configured:
            return UpstreamResult(
                status="fatal_error",
                error_kind=ErrorKind.CONFIGURATION,
                error_message="Upstream credential not configured",
                metadata=base_metadata,
            )

        try:
            resp = requests.post(
                self.url,
                params={"key": self._api_key},
                json=request.to_payload(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            logger.error(
                "Gemini transport failure",
                extra={"error": type(e).__name__, "model": self.model_name},
            )
            return UpstreamResult(
                status="recoverable_error",
                error_kind=ErrorKind.NETWORK,
                error_message=type(e).__name__,
                metadata=base_metadata,
            )

        if not resp.ok:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            if not isinstance(body, dict):
                body = {}
            error = body.get("error") or {}
            if not isinstance(error, dict):
                error = {"message": str(error)}

            kind = classify_upstream_error(resp.status_code, error)
            message = error.get("message") or "Failed to get AI response"
            logger.error(
                f"Gemini API error: {resp.status_code} - {message}",
                extra={"status_code": resp.status_code, "kind": kind.value},
            )
            return UpstreamResult(
                status="recoverable_error" if kind.retryable else "fatal_error",
                status_code=resp.status_code,
                error_kind=kind,
                error_message=message,
                metadata=base_metadata,
            )

        try:
            data = resp.json()
        except ValueError:
            return UpstreamResult(
                status="fatal_error",
                status_code=resp.status_code,
                error_kind=ErrorKind.UPSTREAM,
                error_message="Invalid JSON from AI service",
                metadata=base_metadata,
            )

        text = extract_text(data)
        if not text or not text.strip():
            return UpstreamResult(
                status="fatal_error",
                status_code=resp.status_code,
                error_kind=ErrorKind.NO_CONTENT,
                error_message="No response generated from AI",
                metadata=base_metadata,
            )

        return UpstreamResult(
            status="success",
            output=text.strip(),
            status_code=resp.status_code,
            metadata=base_metadata,
        )
