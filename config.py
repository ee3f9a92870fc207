"""
Configuration management for the EcoFarm advisor.

Loads environment variables from .env file and provides typed access to configuration.
The upstream credential is read once here, at process start, and nowhere else.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Configuration class for the EcoFarm advisor."""

    # Upstream generative-AI service (server side only)
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-pro")
    GEMINI_API_BASE_URL = os.getenv(
        "GEMINI_API_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )
    UPSTREAM_TIMEOUT_S = float(os.getenv("UPSTREAM_TIMEOUT_S", "30"))

    # Client wrapper
    AI_API_ENDPOINT = os.getenv("AI_API_ENDPOINT", "http://localhost:8000/api/gemini")
    AI_RETRIES = int(os.getenv("AI_RETRIES", "3"))
    AI_RETRY_DELAY_S = float(os.getenv("AI_RETRY_DELAY_S", "1.0"))
    AI_TIMEOUT_S = float(os.getenv("AI_TIMEOUT_S", "60"))

    # Proxy service
    AGENT_PORT = int(os.getenv("AGENT_PORT", "8000"))
    LLM_BACKEND = os.getenv("LLM_BACKEND", "gemini")

    # Environment
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    @classmethod
    def missing(cls) -> list:
        """Names of required variables that are not set."""
        required = ["GEMINI_API_KEY"] if cls.LLM_BACKEND == "gemini" else []
        return [key for key in required if not getattr(cls, key)]

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        missing = cls.missing()

        if missing:
            print(f"⚠️  Missing required environment variables: {', '.join(missing)}")
            print(f"   Please set them in .env file")
            return False

        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Gemini API Key: {'✓ Set' if Config.GEMINI_API_KEY else '✗ Missing'}")
    print(f"  Gemini Model: {Config.GEMINI_MODEL}")
    print(f"  Agent Port: {Config.AGENT_PORT}")
    print(f"  LLM Backend: {Config.LLM_BACKEND}")
    print(f"  Client Endpoint: {Config.AI_API_ENDPOINT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
