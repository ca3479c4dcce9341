"""Projection of a validated PRD into the flat project configuration.

The :class:`ProjectConfiguration` is the single variable set every render
call receives, so feature flag names cannot drift between stages.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from codepaladin.validator.models import FEATURE_NAMES, PRD

from .frameworks import template_id_for


class ProjectConfiguration(BaseModel):
    """Derived, immutable configuration for one generation run."""

    model_config = ConfigDict(frozen=True)

    template: str = Field(..., description="Internal template identifier")
    database: str
    ui_framework: str
    auth_provider: str
    deployment: str
    features: tuple[str, ...] = Field(
        default=(), description="Enabled feature names in canonical order"
    )

    auth: bool = False
    admin: bool = False
    upload: bool = False
    email: bool = False
    payment: bool = False
    realtime: bool = False
    analytics: bool = False
    i18n: bool = False
    pwa: bool = False
    seo: bool = False

    @property
    def uses_tailwind(self) -> bool:
        return "tailwind" in self.ui_framework

    def as_context(self) -> dict[str, Any]:
        """Return the flat template context."""
        context = self.model_dump()
        context["features"] = list(self.features)
        return context


def project_configuration(prd: PRD) -> ProjectConfiguration:
    """Map *prd* onto a :class:`ProjectConfiguration`.

    Pure and total: the PRD is already validated, and an unmapped framework
    falls back to the default template identifier.
    """
    stack = prd.tech_stack
    flags = {name: getattr(prd.features, name) for name in FEATURE_NAMES}
    return ProjectConfiguration(
        template=template_id_for(stack.framework),
        database=stack.database,
        ui_framework=stack.ui_framework,
        auth_provider=stack.auth,
        deployment=stack.deployment,
        features=tuple(prd.features.enabled()),
        **flags,
    )
