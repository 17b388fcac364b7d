"""Mistral Cloud API provider."""

from llm.openai_compatible import OpenAICompatibleProvider


class MistralCloudProvider(OpenAICompatibleProvider):
    """
    Mistral Cloud API provider.

    Mistral's chat completions endpoint follows the OpenAI wire format,
    including ``response_format={"type": "json_object"}``.
    """

    default_base_url = "https://api.mistral.ai/v1"
    default_model = "mistral-large-latest"

    @property
    def provider_name(self) -> str:
        """Get provider name."""
        return "mistral_cloud"
