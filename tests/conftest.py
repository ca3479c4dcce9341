"""Shared pytest fixtures for the CodePaladin test suite.

Provides reusable fixtures for:
- Sample PRD documents (raw and validated)
- A minimal in-memory template store
- Fake text generators for the content filler
- Mocked Ollama responses
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from codepaladin.llm_client import LLMResponse
from codepaladin.scaffolder.templates import InMemoryTemplateStore
from codepaladin.validator import PRD, PRDValidator

FIXED_CREATED_AT = "2026-01-15T10:30:00+00:00"


# ---------------------------------------------------------------------------
# PRD documents
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_prd() -> dict[str, Any]:
    """The built-in sample PRD with a fixed timestamp (next.js + auth)."""
    return PRDValidator.generate_sample_prd(created_at=FIXED_CREATED_AT)


@pytest.fixture
def minimal_prd() -> dict[str, Any]:
    """A small valid PRD: react, no features, one page, no environment."""
    return {
        "project": {
            "name": "tiny-app",
            "displayName": "Tiny App",
            "description": "A tiny test application",
            "version": "0.1.0",
        },
        "techStack": {
            "framework": "react",
            "uiFramework": "mui",
            "database": "sqlite",
            "auth": "none",
            "deployment": "static",
        },
        "features": {
            "auth": False,
            "admin": False,
            "upload": False,
            "email": False,
            "payment": False,
            "realtime": False,
            "analytics": False,
            "i18n": False,
            "pwa": False,
            "seo": False,
        },
        "pages": [
            {
                "route": "/",
                "name": "HomePage",
                "title": "Home",
                "components": ["Hero"],
            },
        ],
        "environment": {"variables": {}, "secrets": []},
        "createdAt": FIXED_CREATED_AT,
        "version": "1.0.0",
    }


@pytest.fixture
def make_prd(sample_prd: dict[str, Any]):
    """Factory returning a deep copy of the sample PRD with overrides.

    Usage::

        raw = make_prd(techStack={"framework": "astro"})
    """

    def factory(**sections: Any) -> dict[str, Any]:
        raw = copy.deepcopy(sample_prd)
        for key, value in sections.items():
            if isinstance(value, dict) and isinstance(raw.get(key), dict):
                raw[key].update(value)
            else:
                raw[key] = value
        return raw

    return factory


@pytest.fixture
def valid_prd(sample_prd: dict[str, Any]) -> PRD:
    return PRDValidator(warn=lambda message: None).validate(sample_prd)


@pytest.fixture
def minimal_valid_prd(minimal_prd: dict[str, Any]) -> PRD:
    return PRDValidator(warn=lambda message: None).validate(minimal_prd)


# ---------------------------------------------------------------------------
# Template stores
# ---------------------------------------------------------------------------


MINIMAL_TEMPLATES: dict[str, str] = {
    "base/package.json.j2": '{"name": "{{ project_name }}", "template": "{{ template }}"}\n',
    "base/next.config.js.j2": "module.exports = {};\n",
    "base/astro.config.mjs.j2": "export default {};\n",
    "base/vue.config.js.j2": "module.exports = {};\n",
    "database/schema.prisma.j2": "// {{ database }}\n",
    "database/seed.ts.j2": "// seed {{ template }}\n",
    "pages/page.tsx.j2": "// {{ route }} {{ name }} [{{ components }}] {{ layout }} auth={{ has_auth }}\n",
    "README.md.j2": "# {{ display_name }}\n",
    "features/auth/auth.ts": "// auth\n",
    "features/auth/jwt.ts": "// jwt\n",
    "features/auth/middleware.ts": "// middleware\n",
    "features/auth/validation.ts": "// validation\n",
    "features/auth/api/login.ts": "// login\n",
    "features/auth/api/register.ts": "// register\n",
    "features/auth/api/logout.ts": "// logout\n",
    "features/auth/api/refresh.ts": "// refresh\n",
    "features/auth/api/profile.ts": "// profile\n",
}


@pytest.fixture
def memory_store() -> InMemoryTemplateStore:
    """An in-memory store holding just enough templates for a full run."""
    return InMemoryTemplateStore(dict(MINIMAL_TEMPLATES))


# ---------------------------------------------------------------------------
# Content generation fakes
# ---------------------------------------------------------------------------


class FakeGenerator:
    """Records prompts and returns a canned ``LLMResponse`` (or raises)."""

    def __init__(self, response: LLMResponse | None = None, exc: Exception | None = None) -> None:
        self.response = response or LLMResponse(text="```tsx\nexport default function X() {}\n```")
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    async def generate(self, prompt: str, model: str | None = None, system: str = "") -> LLMResponse:
        self.calls.append({"prompt": prompt, "model": model, "system": system})
        if self.exc is not None:
            raise self.exc
        return self.response


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


# ---------------------------------------------------------------------------
# Mock Ollama
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_ollama():
    """Patch ``httpx.AsyncClient`` with a fake Ollama server.

    ``/api/tags`` lists one model and ``/api/chat`` returns a fenced
    TSX component.

    Usage:
        def test_something(mock_ollama):
            with mock_ollama:
                ...
    """
    tags_response = MagicMock()
    tags_response.status_code = 200
    tags_response.json.return_value = {"models": [{"name": "qwen2.5-coder:14b"}]}
    tags_response.raise_for_status = MagicMock()

    chat_response = MagicMock()
    chat_response.status_code = 200
    chat_response.json.return_value = {
        "model": "qwen2.5-coder:14b",
        "message": {
            "role": "assistant",
            "content": "```tsx\nexport default function Generated() { return null; }\n```",
        },
        "done": True,
        "total_duration": 1234567890,
    }
    chat_response.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=tags_response)
    mock_client.post = AsyncMock(return_value=chat_response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)

    return patch("httpx.AsyncClient", return_value=mock_client)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty output root for generated projects."""
    path = tmp_path / "output"
    path.mkdir()
    return path


@pytest.fixture
def make_generator():
    """The ``FakeGenerator`` class, for tests that need a custom response."""
    return FakeGenerator
