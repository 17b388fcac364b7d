"""Ollama local LLM provider."""

import logging
from typing import Any

import httpx

from core.exceptions import LLMException
from llm.base import BaseLLMProvider

logger = logging.getLogger(__name__)


class OllamaProvider(BaseLLMProvider):
    """Ollama local LLM provider."""

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize Ollama provider."""
        super().__init__(config)
        self.base_url = (config.get("base_url") or "http://ollama:11434").rstrip("/")
        self.model = config.get("model") or "mistral"
        self.timeout = config.get("timeout", 120)

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
        **kwargs: Any,
    ) -> str:
        """Generate text using the Ollama Chat API."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }
        if json_mode:
            payload["format"] = "json"

        # Add any additional options
        payload["options"].update(kwargs)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/api/chat",
                    json=payload,
                )
                response.raise_for_status()
                result = response.json()

        except httpx.HTTPError as e:
            logger.error(f"Ollama Chat API error: {e}")
            raise LLMException(
                f"Ollama Chat API request failed: {str(e)}",
                details={"provider": "ollama", "base_url": self.base_url},
            ) from e
        except ValueError as e:
            logger.error(f"Ollama returned a non-JSON envelope: {e}")
            raise LLMException(
                "Ollama returned an unreadable response",
                details={"provider": "ollama", "error": str(e)},
            ) from e

        try:
            content = result["message"]["content"]
        except (KeyError, TypeError) as e:
            raise LLMException(
                "Ollama response has no message content",
                details={"provider": "ollama", "error": repr(e)},
            ) from e

        if not isinstance(content, str):
            raise LLMException(
                "Ollama response has no message content",
                details={"provider": "ollama"},
            )
        return content

    async def health_check(self) -> bool:
        """Check Ollama availability."""
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"Ollama health check failed: {e}")
            return False

    async def list_models(self) -> list[str]:
        """
        List available models in Ollama.

        Returns:
            List of model names
        """
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
                result = response.json()
                return [model["name"] for model in result.get("models", [])]
        except (httpx.HTTPError, ValueError, KeyError) as e:
            logger.error(f"Failed to list Ollama models: {e}")
            return []

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "ollama"
