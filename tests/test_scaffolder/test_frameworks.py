"""Tests for per-framework profiles: template ids, config files and page paths."""

from __future__ import annotations

import pytest

from codepaladin.scaffolder.frameworks import (
    DEFAULT_PROFILE,
    DEFAULT_TEMPLATE_ID,
    FRAMEWORK_PROFILES,
    get_profile,
    template_id_for,
)
from codepaladin.validator.models import FRAMEWORKS

pytestmark = pytest.mark.unit


class TestTemplateIds:
    @pytest.mark.parametrize("framework,template_id", [
        ("next.js", "nextjs"),
        ("astro", "astro"),
        ("vue", "vue"),
        ("react", "react"),
        ("svelte", "svelte"),
    ])
    def test_mapping(self, framework, template_id):
        assert template_id_for(framework) == template_id

    def test_unknown_framework_falls_back(self):
        assert template_id_for("ember") == DEFAULT_TEMPLATE_ID
        assert get_profile("ember") is DEFAULT_PROFILE

    def test_every_supported_framework_has_a_profile(self):
        assert set(FRAMEWORK_PROFILES) == set(FRAMEWORKS)


class TestConfigFiles:
    @pytest.mark.parametrize("framework,output", [
        ("next.js", "next.config.js"),
        ("astro", "astro.config.mjs"),
        ("vue", "vue.config.js"),
    ])
    def test_frameworks_with_config(self, framework, output):
        profile = get_profile(framework)
        assert profile.has_config_file
        assert profile.config_output == output
        assert profile.config_template == f"base/{output}.j2"

    @pytest.mark.parametrize("framework", ["react", "svelte", "unknown"])
    def test_frameworks_without_config(self, framework):
        assert get_profile(framework).has_config_file is False


class TestPagePaths:
    @pytest.mark.parametrize("framework,route,path", [
        ("next.js", "/", "pages/index.tsx"),
        ("next.js", "/dashboard", "pages/dashboard.tsx"),
        ("next.js", "/blog/post", "pages/blog/post.tsx"),
        ("astro", "/", "src/pages/index.astro"),
        ("astro", "/about", "src/pages/about.astro"),
        ("vue", "/", "src/pages/Home.tsx"),
        ("react", "/settings", "src/pages/settings.tsx"),
        ("svelte", "/", "src/pages/Home.tsx"),
        ("unknown", "/x", "src/pages/x.tsx"),
    ])
    def test_page_path(self, framework, route, path):
        assert get_profile(framework).page_path(route) == path
