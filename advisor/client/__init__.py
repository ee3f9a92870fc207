"""
Client request wrapper for the AI proxy endpoint.

Example usage:
    from advisor.client import get_ai_response

    text = await get_ai_response("How to increase wheat yield?")
"""

from .errors import AIRequestError, error_from_response
from .retry import retry_with_backoff
from .ai_client import (
    AIClient,
    AIResult,
    display_text,
    get_ai_response,
    get_ai_response_with_image,
    get_default_client,
)

__all__ = [
    "AIRequestError",
    "error_from_response",
    "retry_with_backoff",
    "AIClient",
    "AIResult",
    "display_text",
    "get_ai_response",
    "get_ai_response_with_image",
    "get_default_client",
]
