from typing import List, Optional

from .base import ModelBackend
from .types import PromptRequest, UpstreamResult


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for testing and CI.

    This backend is fast, deterministic, and never fails silently.
    Every request it receives is kept in `requests` so callers can
    assert on what was sent upstream.
    """

    model_name = "stub"

    def __init__(
        self,
        output: str = "This is a stubbed response.",
        failure: Optional[UpstreamResult] = None,
    ):
        self.output = output
        self.failure = failure
        self.requests: List[PromptRequest] = []

    def generate(self, request: PromptRequest) -> UpstreamResult:
        """
        Return the canned output, or the canned failure when one is set.

        Args:
            request: PromptRequest the proxy assembled

        Returns:
            UpstreamResult
        """
        self.requests.append(request)

        if self.failure is not None:
            return self.failure

        return UpstreamResult(
            status="success",
            output=self.output.strip(),
            status_code=200,
            metadata={"backend": "stub"},
        )
