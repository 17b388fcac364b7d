#!/usr/bin/env python3
"""Smoke test for the configured LLM provider and the full conversion path."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.config import get_settings
from core.exceptions import TreatmentFDXException
from fdx.encoder import encode
from llm.factory import get_llm_provider
from services.structuring import ScreenplayStructurer

SAMPLE_TREATMENT = (
    "A man walks into a bar and orders a drink. The bartender recognizes him "
    "from an old photograph and quietly reaches for the phone."
)


async def main(treatment: str, title: str, author: str) -> None:
    """Check provider health, structure a treatment and print the FDX."""
    settings = get_settings()

    print(f"Testing LLM provider: {settings.llm_provider}")
    print("=" * 60)

    try:
        provider = get_llm_provider(settings)
        print(f"Provider initialized: {provider.provider_name}")

        print("\nRunning health check...")
        if not await provider.health_check():
            print("Provider health check failed")
            sys.exit(1)
        print("Provider is healthy")

        if provider.provider_name == "ollama":
            models = await provider.list_models()
            print("Available Ollama models: " + (", ".join(models) or "none"))

        print("\nStructuring treatment...")
        structurer = ScreenplayStructurer(
            provider,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            max_treatment_chars=settings.max_treatment_chars,
        )
        screenplay = await structurer.structure(treatment, title, author)
        print(f"Scenes: {len(screenplay.scenes)}, elements: {screenplay.element_count}")

        print("\nFDX output:\n")
        print(encode(screenplay, title, author))

    except (TreatmentFDXException, ValueError) as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("treatment_file", nargs="?", type=Path, help="Treatment text file")
    parser.add_argument("--title", default="Bar Scene")
    parser.add_argument("--author", default="J. Doe")
    args = parser.parse_args()

    text = (
        args.treatment_file.read_text(encoding="utf-8")
        if args.treatment_file
        else SAMPLE_TREATMENT
    )
    asyncio.run(main(text, args.title, args.author))
