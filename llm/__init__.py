"""LLM Provider package for the treatment-to-FDX service."""

from llm.base import BaseLLMProvider
from llm.factory import get_llm_provider

__all__ = ["get_llm_provider", "BaseLLMProvider"]
