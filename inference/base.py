from abc import ABC, abstractmethod
from .types import PromptRequest, UpstreamResult


class ModelBackend(ABC):
    """
    Abstract model boundary.
    The proxy handler must depend ONLY on this interface.
    """

    model_name: str = "unknown"

    @property
    def configured(self) -> bool:
        """True when the backend holds everything it needs to call upstream."""
        return True

    @abstractmethod
    def generate(self, request: PromptRequest) -> UpstreamResult:
        """Generate a response from the model. Must not raise."""
        raise NotImplementedError
