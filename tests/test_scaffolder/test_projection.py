"""Tests for projecting a validated PRD onto the ProjectConfiguration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from codepaladin.scaffolder.projection import ProjectConfiguration, project_configuration
from codepaladin.validator import validate_prd
from codepaladin.validator.models import FEATURE_NAMES

pytestmark = pytest.mark.unit


class TestProjectConfiguration:
    def test_sample_projection(self, valid_prd):
        config = project_configuration(valid_prd)
        assert config.template == "nextjs"
        assert config.database == "postgresql"
        assert config.ui_framework == "tailwind-radix"
        assert config.auth_provider == "supabase"
        assert config.deployment == "vercel"
        assert config.features == ("auth", "upload", "email", "analytics", "seo")
        assert config.auth and config.upload and config.seo
        assert not config.admin and not config.payment

    def test_flags_mirror_prd(self, valid_prd):
        config = project_configuration(valid_prd)
        for name in FEATURE_NAMES:
            assert getattr(config, name) == getattr(valid_prd.features, name)

    def test_projection_is_pure(self, valid_prd):
        assert project_configuration(valid_prd) == project_configuration(valid_prd)

    def test_immutable(self, valid_prd):
        config = project_configuration(valid_prd)
        with pytest.raises(ValidationError):
            config.template = "other"

    def test_uses_tailwind(self, valid_prd, minimal_valid_prd):
        assert project_configuration(valid_prd).uses_tailwind is True
        assert project_configuration(minimal_valid_prd).uses_tailwind is False

    def test_as_context(self, minimal_valid_prd):
        context = project_configuration(minimal_valid_prd).as_context()
        assert context["template"] == "react"
        assert context["features"] == []
        assert context["auth"] is False
        assert set(FEATURE_NAMES) <= set(context)

    @pytest.mark.parametrize("framework,template", [
        ("astro", "astro"),
        ("svelte", "svelte"),
    ])
    def test_template_per_framework(self, make_prd, framework, template):
        prd = validate_prd(make_prd(techStack={"framework": framework}))
        assert project_configuration(prd).template == template

    def test_direct_construction(self):
        config = ProjectConfiguration(
            template="default",
            database="sqlite",
            ui_framework="antd",
            auth_provider="none",
            deployment="static",
        )
        assert config.features == ()
        assert config.as_context()["features"] == []
