"""Shared test fixtures."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from uxa.schemas.config import AuditOptions
from uxa.schemas.report import AccessibilityFinding, ElementLocator
from uxa.shared.llm_client import LLMClient

VALID_RESULT: dict[str, Any] = {
    "overall": 82,
    "breakdown": {
        "accessibility": 70,
        "contentClarity": 88,
        "navigation": 85,
        "visualDesign": 80,
        "mobileFriendliness": 90,
    },
    "improvements": [
        {
            "title": "Add a skip-to-content link",
            "why": "Keyboard users must tab through the whole header on every page.",
            "how": "Insert a visually hidden link to #main as the first focusable element.",
            "priority": "high",
        }
    ],
    "summary": {
        "executive": "The site is clear and fast. Keyboard navigation needs work.",
        "developerTodo": ["Add a skip link", "Audit focus styles"],
    },
}


@pytest.fixture
def valid_result() -> dict[str, Any]:
    """A fresh deep copy of a schema-valid audit result payload."""
    return copy.deepcopy(VALID_RESULT)


@pytest.fixture
def findings() -> list[AccessibilityFinding]:
    return [
        AccessibilityFinding(
            id="image-alt",
            description="Images must have alternate text",
            nodes=[ElementLocator(target=["IMG"]), ElementLocator(target=["IMG"])],
        ),
        AccessibilityFinding(
            id="label",
            description="Form elements must have labels",
            nodes=[ElementLocator(target=["INPUT"])],
        ),
    ]


@pytest.fixture
def options(tmp_path: Path) -> AuditOptions:
    """Options writing run folders under a temp directory with short timeouts."""
    return AuditOptions(
        output_directory=str(tmp_path / "artifacts"),
        capture_timeout=5,
        inspect_timeout=5,
        evaluate_timeout=5,
    )


@pytest.fixture
def env_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Populate the four required evaluator environment variables."""
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example-resource.openai.azure.com")
    monkeypatch.setenv("AZURE_OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4o")
    monkeypatch.setenv("AZURE_OPENAI_API_VERSION", "2024-08-01-preview")


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Return an LLMClient with a mocked OpenAI SDK underneath."""
    client = LLMClient.__new__(LLMClient)
    client._model = "gpt-4o"
    client._client = AsyncMock()
    return client


class FakeCompletionClient:
    """Records calls and replays a canned response (or raises)."""

    def __init__(self, response: str | dict | None = None, *, error: BaseException | None = None) -> None:
        if isinstance(response, dict):
            response = json.dumps(response)
        self.response = response or ""
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def structured_completion(self, **kwargs: Any) -> str:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_client_cls() -> type[FakeCompletionClient]:
    return FakeCompletionClient
