import os
from typing import List, Optional, Tuple

# Default to the memory backend so tests never touch the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from taskmanager.api.generation import TextGenerator, get_generator  # noqa: E402
from taskmanager.api.main import app  # noqa: E402
from taskmanager.api.repositories import InMemoryRepository, get_repository  # noqa: E402


class FakeGenerator(TextGenerator):
    """Stands in for Gemini: returns `text` or raises `error`, recording each call."""

    def __init__(self) -> None:
        self.text = "generated"
        self.error: Optional[Exception] = None
        self.calls: List[Tuple[str, str, int]] = []

    async def generate(self, prompt: str, api_key: str, max_tokens: int) -> str:
        self.calls.append((prompt, api_key, max_tokens))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def repo():
    repository = InMemoryRepository()
    app.dependency_overrides[get_repository] = lambda: repository
    yield repository
    app.dependency_overrides.pop(get_repository, None)


@pytest.fixture
def generator():
    fake = FakeGenerator()
    app.dependency_overrides[get_generator] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_generator, None)


@pytest.fixture
def client(repo, generator):
    return TestClient(app)
