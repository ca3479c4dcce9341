"""Tests for the feature module sub-generators."""

from __future__ import annotations

from pathlib import Path

import pytest

from codepaladin.errors import TemplateError
from codepaladin.scaffolder.features import (
    AUTH_API_FILES,
    AUTH_SUPPORT_FILES,
    FEATURE_CATALOG,
    FEATURE_GENERATORS,
    FeatureContext,
    generate_auth,
)
from codepaladin.scaffolder.projection import project_configuration
from codepaladin.scaffolder.templates import InMemoryTemplateStore, TemplateRenderer
from codepaladin.validator import validate_prd
from codepaladin.validator.models import FEATURE_NAMES

pytestmark = pytest.mark.unit


def _context(prd, store, root: Path) -> FeatureContext:
    return FeatureContext(
        prd=prd,
        config=project_configuration(prd),
        renderer=TemplateRenderer(store),
        project_root=root,
    )


class TestRegistry:
    def test_generation_order(self):
        assert list(FEATURE_GENERATORS) == ["auth", "upload", "email", "payment", "realtime"]

    def test_catalog_covers_every_flag(self):
        assert [entry["name"] for entry in FEATURE_CATALOG] == list(FEATURE_NAMES)

    def test_catalog_dependencies(self):
        deps = {entry["name"]: entry["dependencies"] for entry in FEATURE_CATALOG}
        assert deps["auth"] == ["database"]
        assert deps["admin"] == ["auth"]
        assert deps["email"] == []


class TestAuthFeature:
    async def test_next_gets_lib_and_api(self, valid_prd, memory_store, tmp_path: Path):
        files = await generate_auth(_context(valid_prd, memory_store, tmp_path))
        assert files == [f"lib/auth/{n}" for n in AUTH_SUPPORT_FILES] + [
            f"pages/api/auth/{n}" for n in AUTH_API_FILES
        ]
        assert (tmp_path / "lib/auth/jwt.ts").read_text(encoding="utf-8") == "// jwt\n"
        assert (tmp_path / "pages/api/auth/login.ts").exists()

    async def test_other_frameworks_get_lib_only(self, make_prd, memory_store, tmp_path: Path):
        prd = validate_prd(make_prd(techStack={"framework": "react"}))
        files = await generate_auth(_context(prd, memory_store, tmp_path))
        assert files == [f"lib/auth/{n}" for n in AUTH_SUPPORT_FILES]
        assert not (tmp_path / "pages").exists()

    async def test_missing_asset_fails(self, valid_prd, tmp_path: Path):
        store = InMemoryTemplateStore({"features/auth/auth.ts": "// only one\n"})
        with pytest.raises(TemplateError, match="Template file not found"):
            await generate_auth(_context(valid_prd, store, tmp_path))


class TestPlaceholderFeatures:
    @pytest.mark.parametrize("name", ["upload", "email", "payment", "realtime"])
    async def test_writes_nothing(self, name, valid_prd, memory_store, tmp_path: Path):
        files = await FEATURE_GENERATORS[name](_context(valid_prd, memory_store, tmp_path))
        assert files == []
        assert list(tmp_path.iterdir()) == []
