"""
tests/api/conftest.py

Shared fixtures for API route tests.

The `provider` fixture is a stub completion client (AsyncMock methods)
whose `complete` return value each test configures.

The `client` fixture:
  - Patches build_completion_client in the app lifespan so the stub is
    injected into the real AskPipeline and no credential is needed.
  - Clears dependency_overrides after each test to avoid cross-test leakage.
"""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from docqa.main import app


def completion_body(content: str | None) -> dict:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


@pytest.fixture()
def provider() -> MagicMock:
    stub = MagicMock()
    stub.complete = AsyncMock(return_value=completion_body("It does X."))
    stub.aclose = AsyncMock()
    return stub


@pytest.fixture()
def client(provider: MagicMock) -> TestClient:  # type: ignore[return]
    """
    Return a TestClient whose app was started with the stub provider.

    Yields inside a context manager so the lifespan runs for the full
    duration of each test.
    """
    with patch("docqa.main.build_completion_client", return_value=provider):
        with TestClient(app, raise_server_exceptions=True) as c:
            yield c

    app.dependency_overrides.clear()
