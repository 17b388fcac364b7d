"""Pytest configuration and fixtures."""

import json
from typing import Any

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_file_store, get_provider
from api.main import app
from core.exceptions import LLMException
from llm.base import BaseLLMProvider
from services.file_store import FileStore

BAR_SCENE_REPLY: dict[str, Any] = {
    "scenes": [
        {
            "heading": "INT. BAR - NIGHT",
            "elements": [
                {"type": "action", "content": "A man enters."},
                {"type": "character", "content": "MAN"},
                {"type": "dialogue", "content": "Whiskey, neat."},
            ],
        }
    ]
}


class FakeProvider(BaseLLMProvider):
    """In-memory provider returning a canned reply body."""

    def __init__(self, reply: str = "", error: Exception | None = None, healthy: bool = True):
        super().__init__({})
        self.reply = reply
        self.error = error
        self.healthy = healthy
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
        **kwargs: Any,
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "system_prompt": system_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "json_mode": json_mode,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply

    async def health_check(self) -> bool:
        return self.healthy

    @property
    def provider_name(self) -> str:
        return "fake"


@pytest.fixture
def provider_factory() -> type[FakeProvider]:
    """Build providers with custom replies or errors."""
    return FakeProvider


@pytest.fixture
def bar_scene_reply() -> str:
    """Reply body for the one-scene bar example."""
    return json.dumps(BAR_SCENE_REPLY)


@pytest.fixture
def fake_provider(bar_scene_reply) -> FakeProvider:
    """Provider that answers with the bar scene."""
    return FakeProvider(reply=bar_scene_reply)


@pytest.fixture
def failing_provider() -> FakeProvider:
    """Provider whose service is unreachable."""
    return FakeProvider(
        error=LLMException("connection refused", details={"provider": "fake"})
    )


@pytest.fixture
def file_store(tmp_path) -> FileStore:
    """File store writing into a temporary directory."""
    return FileStore(tmp_path / "output")


@pytest.fixture
def make_client(file_store):
    """Build a test client whose conversions use the given provider."""

    def _make(provider: BaseLLMProvider) -> TestClient:
        async def _provider_override() -> BaseLLMProvider:
            return provider

        async def _file_store_override() -> FileStore:
            return file_store

        app.dependency_overrides[get_provider] = _provider_override
        app.dependency_overrides[get_file_store] = _file_store_override
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, fake_provider) -> TestClient:
    """Test client backed by the bar scene provider."""
    return make_client(fake_provider)
