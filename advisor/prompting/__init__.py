from .prompt_builder import build_prompt_request

__all__ = ["build_prompt_request"]
