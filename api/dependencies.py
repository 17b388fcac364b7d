"""FastAPI dependency injection functions."""

from fastapi import Depends

from api.config import Settings, get_settings
from core.exceptions import StructuringError
from llm.base import BaseLLMProvider
from llm.factory import get_llm_provider
from services.conversion import ConversionService
from services.file_store import FileStore
from services.structuring import ScreenplayStructurer


async def get_settings_dependency() -> Settings:
    """Get application settings."""
    return get_settings()


async def get_provider(
    settings: Settings = Depends(get_settings_dependency),
) -> BaseLLMProvider:
    """Get the configured LLM provider."""
    try:
        return get_llm_provider(settings)
    except ValueError as exc:
        raise StructuringError(
            "Text generation service is not configured",
            details={"provider": settings.llm_provider, "error": str(exc)},
        ) from exc


async def get_file_store(
    settings: Settings = Depends(get_settings_dependency),
) -> FileStore:
    """Get the store for generated documents."""
    return FileStore(settings.output_dir)


async def get_structurer(
    provider: BaseLLMProvider = Depends(get_provider),
    settings: Settings = Depends(get_settings_dependency),
) -> ScreenplayStructurer:
    """Get a treatment structurer bound to the configured provider."""
    return ScreenplayStructurer(
        provider,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        max_treatment_chars=settings.max_treatment_chars,
    )


async def get_conversion_service(
    structurer: ScreenplayStructurer = Depends(get_structurer),
    file_store: FileStore = Depends(get_file_store),
    settings: Settings = Depends(get_settings_dependency),
) -> ConversionService:
    """Get the treatment -> FDX conversion pipeline."""
    return ConversionService(
        structurer,
        file_store,
        default_title=settings.default_title,
        default_author=settings.default_author,
    )
