"""Tests for the PRD pydantic models (structural validation pass).

Covers:
- Accepting the sample PRD
- Field-path formatting of every structural violation
- Closed enumerations, strict booleans and unknown-key rejection
- Round-tripping the validated document
"""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from codepaladin.validator.models import (
    FEATURE_NAMES,
    FRAMEWORKS,
    PRD,
    format_validation_errors,
)

pytestmark = pytest.mark.unit


def _errors(raw: Any) -> list[str]:
    with pytest.raises(ValidationError) as exc_info:
        PRD.model_validate(raw)
    return format_validation_errors(exc_info.value)


class TestAcceptance:
    def test_sample_prd_is_structurally_valid(self, sample_prd):
        prd = PRD.model_validate(sample_prd)
        assert prd.project.name == "my-awesome-app"
        assert prd.project.display_name == "My Awesome App"
        assert prd.tech_stack.framework == "next.js"
        assert prd.tech_stack.ui_framework == "tailwind-radix"
        assert [page.route for page in prd.pages] == ["/", "/dashboard"]

    def test_enabled_features_in_canonical_order(self, sample_prd):
        prd = PRD.model_validate(sample_prd)
        assert prd.features.enabled() == ["auth", "upload", "email", "analytics", "seo"]

    def test_models_are_immutable(self, sample_prd):
        prd = PRD.model_validate(sample_prd)
        with pytest.raises(ValidationError):
            prd.project.name = "other"

    def test_snake_case_names_also_accepted(self, minimal_prd):
        raw = dict(minimal_prd)
        raw["tech_stack"] = raw.pop("techStack")
        raw["created_at"] = raw.pop("createdAt")
        prd = PRD.model_validate(raw)
        assert prd.tech_stack.framework == "react"

    def test_constants(self):
        assert len(FEATURE_NAMES) == 10
        assert FRAMEWORKS == ("next.js", "astro", "vue", "react", "svelte")


class TestFieldErrors:
    def test_invalid_project_name(self, make_prd):
        errors = _errors(make_prd(project={"name": "My App"}))
        assert len(errors) == 1
        assert errors[0].startswith("project.name: ")

    def test_project_name_too_long(self, make_prd):
        errors = _errors(make_prd(project={"name": "a" * 51}))
        assert errors[0].startswith("project.name: ")

    def test_invalid_version(self, make_prd):
        errors = _errors(make_prd(project={"version": "1.0"}))
        assert errors[0].startswith("project.version: ")

    def test_unknown_framework_uses_camel_case_path(self, make_prd):
        errors = _errors(make_prd(techStack={"uiFramework": "bootstrap"}))
        assert len(errors) == 1
        assert errors[0].startswith("techStack.uiFramework: ")

    def test_missing_feature_flag(self, make_prd):
        raw = make_prd()
        del raw["features"]["seo"]
        assert _errors(raw) == ["features.seo: Field required"]

    def test_extra_feature_flag(self, make_prd):
        errors = _errors(make_prd(features={"darkMode": True}))
        assert len(errors) == 1
        assert errors[0].startswith("features.darkMode: ")

    def test_feature_flags_are_strict_booleans(self, make_prd):
        errors = _errors(make_prd(features={"auth": "yes"}))
        assert errors[0].startswith("features.auth: ")

    def test_unknown_top_level_key(self, make_prd):
        errors = _errors(make_prd(theme="dark"))
        assert errors == ["theme: Extra inputs are not permitted"]

    def test_page_errors_include_list_index(self, make_prd, sample_prd):
        pages = [dict(page) for page in sample_prd["pages"]]
        pages[1]["components"] = []
        pages[1]["route"] = "dashboard"
        errors = _errors(make_prd(pages=pages))
        assert len(errors) == 2
        assert any(e.startswith("pages.1.route: ") for e in errors)
        assert any(e.startswith("pages.1.components: ") for e in errors)

    def test_empty_pages(self, make_prd):
        errors = _errors(make_prd(pages=[]))
        assert errors[0].startswith("pages: ")

    def test_invalid_timestamp(self, make_prd):
        errors = _errors(make_prd(createdAt="yesterday"))
        assert len(errors) == 1
        assert errors[0].startswith("createdAt: ")
        assert "ISO-8601" in errors[0]

    def test_every_violation_reported(self, make_prd):
        raw = make_prd(project={"name": "Bad Name"}, techStack={"database": "oracle"})
        del raw["version"]
        errors = _errors(raw)
        assert len(errors) == 3

    def test_non_mapping_input(self):
        errors = _errors(["not", "a", "prd"])
        assert len(errors) == 1


class TestRoundTrip:
    def test_to_dict_matches_input(self, sample_prd):
        prd = PRD.model_validate(sample_prd)
        assert prd.to_dict() == sample_prd

    def test_unset_optionals_are_not_invented(self, minimal_prd):
        data = PRD.model_validate(minimal_prd).to_dict()
        assert set(data) == set(minimal_prd)
        assert "author" not in data["project"]
        page: dict[str, Any] = data["pages"][0]
        assert set(page) == {"route", "name", "title", "components"}
