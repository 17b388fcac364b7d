"""Prompt templates loaded from YAML configuration.

The instruction sent to the text-generation service lives in
``config/prompts/prompts.yaml`` so wording can be tuned without code
changes.  The JSON shape the reply must follow is injected by the caller,
keeping field names owned by the code that parses the reply.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_DEFAULT_YAML_PATH = Path(__file__).resolve().parent.parent / "config" / "prompts" / "prompts.yaml"


class PromptManager:
    """Load prompt templates and render them with ``str.format`` variables.

    Usage::

        pm = get_prompt_manager()
        system, user = pm.get("structuring", "treatment",
            title="Bar Scene",
            author="J. Doe",
            treatment="A man walks into a bar...",
            response_schema="{...}",
        )
    """

    def __init__(self, yaml_path: Path | str | None = None) -> None:
        path = Path(yaml_path) if yaml_path else _DEFAULT_YAML_PATH
        if not path.exists():
            raise FileNotFoundError(f"Prompt YAML not found: {path}")
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Prompt YAML must contain a mapping: {path}")
        self._prompts: dict[str, Any] = data
        self._version = str(data.get("version", "unknown"))
        logger.info("PromptManager loaded v%s from %s", self._version, path)

    @property
    def version(self) -> str:
        return self._version

    def _entry(self, section: str, name: str) -> dict[str, str]:
        try:
            return self._prompts[section][name]
        except (KeyError, TypeError):
            raise KeyError(f"Prompt not found: {section}.{name}")

    def get(self, section: str, name: str, **kwargs: Any) -> tuple[str, str]:
        """Return ``(system_prompt, user_prompt)`` with variables substituted.

        Substituted values are inserted as-is; braces inside them are not
        interpreted.

        Raises ``KeyError`` if section/name does not exist or a template
        variable is missing from *kwargs*.
        """
        entry = self._entry(section, name)
        system = entry["system"].strip()
        try:
            user = entry["user"].strip().format(**kwargs)
        except KeyError as exc:
            raise KeyError(f"Missing prompt variable {exc} for {section}.{name}")
        return system, user

    def sections(self) -> list[str]:
        """List available top-level sections (excluding 'version')."""
        return [k for k in self._prompts if k != "version"]


@lru_cache
def get_prompt_manager() -> PromptManager:
    """Return a cached singleton ``PromptManager``."""
    return PromptManager()
