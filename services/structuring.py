"""Treatment structuring via an external text-generation service.

The raw treatment is sent to the configured LLM provider together with a
fixed instruction and the JSON shape the reply must follow.  The reply is
treated as untrusted: it is parsed and shape-checked into the immutable
``Screenplay`` model, but its content is never corrected.  Any failure on
the way surfaces as a single ``StructuringError``; there are no retries.
"""

import json
import logging
import time
from typing import Any

from pydantic import ValidationError

from core.exceptions import LLMException, StructuringError
from core.models import (
    DEFAULT_AUTHOR,
    DEFAULT_TITLE,
    Screenplay,
    ScreenplayReply,
    TitlePageInfo,
)
from core.prompt_sanitizer import PromptSanitizer
from llm.base import BaseLLMProvider
from llm.prompt_manager import PromptManager, get_prompt_manager

logger = logging.getLogger(__name__)

DEFAULT_MAX_TREATMENT_CHARS = 50_000
_MAX_TITLE_CHARS = 200

# JSON Schema the LLM reply must conform to.  Field names here are the ones
# ``ScreenplayReply`` parses.
SCREENPLAY_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "scenes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "heading": {
                        "type": "string",
                        "description": "Scene heading, e.g. INT. KITCHEN - DAY",
                    },
                    "elements": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "type": {
                                    "type": "string",
                                    "enum": [
                                        "action", "character", "dialogue",
                                        "parenthetical", "transition",
                                    ],
                                },
                                "content": {"type": "string"},
                            },
                            "required": ["type", "content"],
                        },
                    },
                },
                "required": ["heading", "elements"],
            },
        },
    },
    "required": ["scenes"],
}


def _title_line(value: str | None, default: str) -> str:
    cleaned = PromptSanitizer.clean(value).strip()[:_MAX_TITLE_CHARS].rstrip() if value else ""
    return cleaned or default


def build_title_page(
    title: str | None,
    author: str | None,
    default_title: str = DEFAULT_TITLE,
    default_author: str = DEFAULT_AUTHOR,
) -> TitlePageInfo:
    """Clean, bound and default the title page lines.

    The result is a fixed point: feeding its title and author back in
    returns the same values, so the prompt and the encoded title page
    always agree.
    """
    return TitlePageInfo(
        title=_title_line(title, default_title),
        author=_title_line(author, default_author),
    )


def build_prompt(
    treatment: str,
    title_page: TitlePageInfo,
    prompt_manager: PromptManager | None = None,
) -> tuple[str, str]:
    """Render ``(system_prompt, user_prompt)`` for one treatment."""
    pm = prompt_manager or get_prompt_manager()
    system_prompt, user_prompt = pm.get(
        "structuring",
        "treatment",
        title=title_page.title,
        author=title_page.author,
        treatment=treatment,
        response_schema=json.dumps(SCREENPLAY_RESPONSE_SCHEMA, indent=2),
    )
    return PromptSanitizer.wrap_with_system_lock(system_prompt), user_prompt


def parse_structured_reply(body: str) -> Screenplay:
    """Parse a raw reply body into a ``Screenplay``.

    Raises ``StructuringError`` if *body* is not JSON, is not an object, or
    does not match the requested shape.  Never returns a partial result.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.error("Structuring reply is not valid JSON: %s", exc)
        raise StructuringError(
            f"Text generation service returned invalid JSON: {exc}",
            details={"error": str(exc), "reason": "invalid_json"},
        ) from exc

    if not isinstance(data, dict):
        raise StructuringError(
            "Text generation service reply is not a JSON object",
            details={"error": f"got {type(data).__name__}", "reason": "invalid_shape"},
        )

    try:
        reply = ScreenplayReply.model_validate(data)
    except ValidationError as exc:
        logger.error("Structuring reply has unexpected shape: %s", exc)
        raise StructuringError(
            "Text generation service reply does not match the screenplay shape",
            details={"error": str(exc), "reason": "invalid_shape"},
        ) from exc

    return reply.to_screenplay()


class ScreenplayStructurer:
    """Turn a treatment into a ``Screenplay`` using an LLM provider."""

    def __init__(
        self,
        provider: BaseLLMProvider,
        prompt_manager: PromptManager | None = None,
        *,
        temperature: float = 0.2,
        max_tokens: int = 8000,
        max_treatment_chars: int = DEFAULT_MAX_TREATMENT_CHARS,
    ) -> None:
        self.provider = provider
        self.prompt_manager = prompt_manager
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_treatment_chars = max_treatment_chars

    def prepare(
        self, treatment: str, title: str | None, author: str | None
    ) -> tuple[str, TitlePageInfo]:
        """Clean and bound user input before it is embedded into the prompt.

        Raises ``ValidationException`` for empty or oversized treatments.
        """
        clean_treatment = PromptSanitizer.validate_and_clean(
            treatment, self.max_treatment_chars, field="treatment"
        )
        title_page = build_title_page(title, author)
        return clean_treatment, title_page

    async def structure(
        self, treatment: str, title: str | None = None, author: str | None = None
    ) -> Screenplay:
        """Structure *treatment* into a ``Screenplay``.

        Performs exactly one provider call.

        Raises:
            ValidationException: If the treatment is empty or too long
            StructuringError: If the service fails or its reply is malformed
        """
        clean_treatment, title_page = self.prepare(treatment, title, author)
        system_prompt, user_prompt = build_prompt(
            clean_treatment, title_page, self.prompt_manager
        )

        t0 = time.monotonic()
        try:
            body = await self.provider.generate(
                prompt=user_prompt,
                system_prompt=system_prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
        except LLMException as exc:
            logger.error(
                "Structuring call to %s failed: %s", self.provider.provider_name, exc.message
            )
            raise StructuringError(
                f"Text generation service failed: {exc.message}",
                details={"provider": self.provider.provider_name, **exc.details},
            ) from exc

        screenplay = parse_structured_reply(body)

        logger.info(
            "Structured treatment (%d chars) via %s: %d scenes, %d elements in %.2fs",
            len(clean_treatment),
            self.provider.provider_name,
            len(screenplay.scenes),
            screenplay.element_count,
            time.monotonic() - t0,
        )
        return screenplay


async def structure(
    provider: BaseLLMProvider,
    treatment: str,
    title: str | None = None,
    author: str | None = None,
) -> Screenplay:
    """Structure a treatment with default settings."""
    return await ScreenplayStructurer(provider).structure(treatment, title, author)
