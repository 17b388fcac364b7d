"""OpenAI-compatible chat completions provider."""

import logging
from typing import Any

import httpx

from core.exceptions import LLMException
from llm.base import BaseLLMProvider

logger = logging.getLogger(__name__)


class OpenAICompatibleProvider(BaseLLMProvider):
    """Provider for any service speaking the OpenAI ``/chat/completions`` API."""

    default_base_url = "https://api.openai.com/v1"
    default_model = "gpt-4o-mini"

    def __init__(self, config: dict[str, Any]) -> None:
        """Initialize OpenAI-compatible provider."""
        super().__init__(config)
        self.api_key = config.get("api_key")
        self.model = config.get("model") or self.default_model
        self.base_url = (config.get("base_url") or self.default_base_url).rstrip("/")
        self.timeout = config.get("timeout", 120)

        if not self.api_key:
            raise ValueError(f"{self.provider_name} API key is required")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
        **kwargs: Any,
    ) -> str:
        """Generate a chat completion and return the message content."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
                response.raise_for_status()
                result = response.json()

        except httpx.HTTPError as e:
            logger.error(f"{self.provider_name} API error: {e}")
            raise LLMException(
                f"{self.provider_name} API request failed: {str(e)}",
                details={"provider": self.provider_name},
            ) from e
        except ValueError as e:
            logger.error(f"{self.provider_name} returned a non-JSON envelope: {e}")
            raise LLMException(
                f"{self.provider_name} returned an unreadable response",
                details={"provider": self.provider_name, "error": str(e)},
            ) from e

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise LLMException(
                f"{self.provider_name} response has no completion content",
                details={"provider": self.provider_name, "error": repr(e)},
            ) from e

        if not isinstance(content, str):
            raise LLMException(
                f"{self.provider_name} response has no completion content",
                details={"provider": self.provider_name},
            )
        return content

    async def health_check(self) -> bool:
        """Check API availability."""
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.error(f"{self.provider_name} health check failed: {e}")
            return False

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "openai"
