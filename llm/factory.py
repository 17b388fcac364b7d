"""Factory for creating LLM providers."""

import logging

from api.config import Settings
from llm.base import BaseLLMProvider
from llm.mistral_cloud import MistralCloudProvider
from llm.ollama import OllamaProvider
from llm.openai_compatible import OpenAICompatibleProvider

logger = logging.getLogger(__name__)

VALID_PROVIDERS = ("openai", "mistral_cloud", "ollama")


def get_llm_provider(settings: Settings) -> BaseLLMProvider:
    """
    Create LLM provider based on settings.

    Args:
        settings: Application settings

    Returns:
        Initialized LLM provider

    Raises:
        ValueError: If provider type is invalid or misconfigured
    """
    provider_type = settings.llm_provider.lower()

    logger.info(f"Initializing LLM provider: {provider_type}")

    if provider_type == "openai":
        config = {
            "api_key": settings.openai_api_key,
            "base_url": settings.openai_base_url,
            "model": settings.openai_model,
            "timeout": settings.openai_timeout,
        }
        return OpenAICompatibleProvider(config)

    elif provider_type == "mistral_cloud":
        config = {
            "api_key": settings.mistral_api_key,
            "model": settings.mistral_model,
            "timeout": settings.mistral_timeout,
        }
        return MistralCloudProvider(config)

    elif provider_type == "ollama":
        config = {
            "base_url": settings.ollama_base_url,
            "model": settings.ollama_model,
            "timeout": settings.ollama_timeout,
        }
        return OllamaProvider(config)

    else:
        raise ValueError(
            f"Invalid LLM provider: {provider_type}. "
            f"Valid options: {', '.join(VALID_PROVIDERS)}"
        )
