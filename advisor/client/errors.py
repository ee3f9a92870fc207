"""
Client-side error taxonomy.

Every failure the client can observe is raised as an AIRequestError whose
`kind` is fixed where the failure happens. The retry policy and the display
mapping switch on that kind only.
"""

from typing import Any, Dict, Optional

from inference.types import ErrorKind

_TRANSIENT_STATUS_CODES = {429, 503}


class AIRequestError(Exception):
    """One failed attempt to get an answer."""

    def __init__(self, kind: ErrorKind, message: str, status_code: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def __repr__(self) -> str:
        return f"AIRequestError(kind={self.kind.value!r}, status_code={self.status_code!r}, message={self.message!r})"


def _parse_kind(value: Any) -> Optional[ErrorKind]:
    try:
        return ErrorKind(value)
    except ValueError:
        return None


def error_from_response(status_code: int, body: Optional[Dict[str, Any]]) -> AIRequestError:
    """
    Build the error for a non-2xx proxy response.

    The proxy's `kind` field wins when present; otherwise the status code
    decides. 429 and 503 are always transient.
    """
    body = body if isinstance(body, dict) else {}
    message = body.get("error")
    if not isinstance(message, str) or not message:
        message = f"API Error: {status_code}"

    if status_code in _TRANSIENT_STATUS_CODES:
        return AIRequestError(ErrorKind.TRANSIENT, f"Transient Error: {status_code}", status_code)

    kind = _parse_kind(body.get("kind"))
    if kind is None:
        if status_code in (401, 403):
            kind = ErrorKind.AUTH
        elif 400 <= status_code < 500:
            kind = ErrorKind.MALFORMED_REQUEST
        else:
            kind = ErrorKind.UPSTREAM

    return AIRequestError(kind, message, status_code)
