"""
Infrastructure module exports.

Configuration and bootstrap for the model backend.
"""

from .config import InfraConfig
from .bootstrap import InfraBootstrap, bootstrap_infrastructure, get_model_backend

__all__ = [
    "InfraConfig",
    "InfraBootstrap",
    "bootstrap_infrastructure",
    "get_model_backend",
]
