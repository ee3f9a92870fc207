"""
Model boundary layer for LLM inference.

This package provides a clean abstraction for model invocation,
allowing the proxy to remain agnostic of the underlying backend.

Supported backends:
- StubModelBackend: Deterministic fake model (default for CI/tests)
- GeminiModelBackend: Google Gemini generateContent over REST

Example usage:
    from inference import StubModelBackend, PromptRequest

    backend = StubModelBackend()
    result = backend.generate(PromptRequest(text="How to increase wheat yield?"))
"""

from .types import (
    ErrorKind,
    GenerationConfig,
    ImagePart,
    PromptRequest,
    UpstreamResult,
)
from .base import ModelBackend
from .stub import StubModelBackend
from .gemini import GeminiModelBackend

__all__ = [
    "ErrorKind",
    "GenerationConfig",
    "ImagePart",
    "PromptRequest",
    "UpstreamResult",
    "ModelBackend",
    "StubModelBackend",
    "GeminiModelBackend",
]
