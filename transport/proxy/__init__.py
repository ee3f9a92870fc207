"""
AI proxy transport.

Exposes /api/gemini: the only place the upstream credential is used.
"""

from .router import CORS_HEADERS, method_not_allowed_handler, router
from .handler import ProxyResponse, handle_question
from .schemas import AnswerMetadata, AskRequest, AskResponse, ErrorResponse

__all__ = [
    "CORS_HEADERS",
    "router",
    "method_not_allowed_handler",
    "ProxyResponse",
    "handle_question",
    "AnswerMetadata",
    "AskRequest",
    "AskResponse",
    "ErrorResponse",
]
