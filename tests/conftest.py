"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


class FakeSleep:
    """Records backoff waits instead of sleeping."""

    def __init__(self):
        self.calls = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture(autouse=True)
def reset_bootstrap():
    """Keep the infrastructure singleton from leaking between tests."""
    from infra import InfraBootstrap

    InfraBootstrap.reset()
    yield
    InfraBootstrap.reset()
