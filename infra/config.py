"""
Infrastructure configuration system.

Backend selection built from the process-wide Config (loaded once from
.env / environment at import). The upstream credential is handed from
there to the backend; no other module reads it.
"""

from typing import Literal
from dataclasses import dataclass, field

from config import Config
from inference import ModelBackend, StubModelBackend, GeminiModelBackend


LLMBackendType = Literal["stub", "gemini"]


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # LLM
    llm_backend: LLMBackendType
    gemini_model: str
    gemini_base_url: str
    upstream_timeout_s: float
    gemini_api_key: str = field(default="", repr=False)

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Build configuration from Config.

        Defaults:
        - LLM: gemini (gemini-pro)
        - Missing GEMINI_API_KEY is NOT replaced by any fallback value
        """
        return cls(
            llm_backend=Config.LLM_BACKEND,  # type: ignore
            gemini_model=Config.GEMINI_MODEL,
            gemini_base_url=Config.GEMINI_API_BASE_URL,
            upstream_timeout_s=Config.UPSTREAM_TIMEOUT_S,
            gemini_api_key=Config.GEMINI_API_KEY,
        )

    @property
    def credential_configured(self) -> bool:
        return self.llm_backend == "stub" or bool(self.gemini_api_key)

    def create_llm_backend(self) -> ModelBackend:
        """Create LLM backend instance based on configuration."""
        if self.llm_backend == "stub":
            return StubModelBackend()
        # Default to gemini
        return GeminiModelBackend(
            api_key=self.gemini_api_key,
            model_name=self.gemini_model,
            base_url=self.gemini_base_url,
            timeout_s=self.upstream_timeout_s,
        )


def get_config() -> InfraConfig:
    """Get global infrastructure configuration."""
    return InfraConfig.from_env()
