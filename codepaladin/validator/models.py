"""Pydantic v2 models for the PRD document.

These models are the structural half of PRD validation: field types, closed
enumerations, length limits and regex constraints.  Wire keys are camelCase;
every model exposes snake_case attributes with camelCase aliases so the
validated document can be dumped back into exactly the shape it came in.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator


# ---------------------------------------------------------------------------
# Closed enumerations
# ---------------------------------------------------------------------------

Framework = Literal["next.js", "astro", "vue", "react", "svelte"]
UIFramework = Literal["tailwind-radix", "tailwind-shadcn", "chakra-ui", "mui", "antd"]
Database = Literal["postgresql", "mysql", "sqlite", "supabase", "mongodb"]
AuthProvider = Literal["supabase", "nextauth", "firebase", "clerk", "auth0", "none"]
Deployment = Literal["vercel", "netlify", "aws", "railway", "docker", "static"]

FRAMEWORKS: tuple[str, ...] = get_args(Framework)
UI_FRAMEWORKS: tuple[str, ...] = get_args(UIFramework)
DATABASES: tuple[str, ...] = get_args(Database)
AUTH_PROVIDERS: tuple[str, ...] = get_args(AuthProvider)
DEPLOYMENT_TARGETS: tuple[str, ...] = get_args(Deployment)

# Canonical order of the feature flags; also the order used in configuration
# and README output.
FEATURE_NAMES: tuple[str, ...] = (
    "auth",
    "admin",
    "upload",
    "email",
    "payment",
    "realtime",
    "analytics",
    "i18n",
    "pwa",
    "seo",
)


class _PRDModel(BaseModel):
    """Shared configuration: unknown keys are rejected, instances are immutable."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class ProjectInfo(_PRDModel):
    """Basic project metadata."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        pattern=r"^[a-z0-9-]+$",
        description="Package name: lowercase letters, digits and hyphens",
    )
    display_name: str = Field(..., alias="displayName", min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    version: str = Field(..., pattern=r"^\d+\.\d+\.\d+$", description="Semantic version")
    author: Optional[str] = Field(default=None)


class TechStack(_PRDModel):
    """One choice from each closed technology enumeration."""

    framework: Framework
    ui_framework: UIFramework = Field(..., alias="uiFramework")
    database: Database
    auth: AuthProvider
    deployment: Deployment


class FeatureFlags(_PRDModel):
    """The ten feature toggles.  None may be omitted and none may be added."""

    auth: StrictBool
    admin: StrictBool
    upload: StrictBool
    email: StrictBool
    payment: StrictBool
    realtime: StrictBool
    analytics: StrictBool
    i18n: StrictBool
    pwa: StrictBool
    seo: StrictBool

    def enabled(self) -> list[str]:
        """Names of the enabled flags, in canonical order."""
        return [name for name in FEATURE_NAMES if getattr(self, name)]


class PageDefinition(_PRDModel):
    """A single routed page of the generated application."""

    route: str = Field(..., pattern=r"^/", description="URL route, must start with '/'")
    name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = Field(default=None)
    layout: Optional[str] = Field(default=None)
    components: list[str] = Field(..., min_length=1, description="Component names, PascalCase")
    auth: Optional[StrictBool] = Field(default=None, description="Page requires a signed-in user")
    public: Optional[StrictBool] = Field(default=None)


class EnvironmentConfig(_PRDModel):
    """Values the generated project expects but does not supply."""

    variables: dict[str, str]
    secrets: list[str]


# ---------------------------------------------------------------------------
# Top-level document
# ---------------------------------------------------------------------------


class PRD(_PRDModel):
    """A validated Product Requirements Document."""

    project: ProjectInfo
    tech_stack: TechStack = Field(..., alias="techStack")
    features: FeatureFlags
    pages: list[PageDefinition] = Field(..., min_length=1)
    environment: EnvironmentConfig
    created_at: str = Field(..., alias="createdAt", description="ISO-8601 creation timestamp")
    version: str = Field(..., description="PRD schema version")

    @field_validator("created_at")
    @classmethod
    def _check_timestamp(cls, value: str) -> str:
        try:
            datetime.fromisoformat(value)
        except ValueError:
            raise ValueError("must be an ISO-8601 timestamp") from None
        return value

    def to_dict(self) -> dict[str, Any]:
        """Dump back to the wire shape, without inventing unset optional keys."""
        return self.model_dump(by_alias=True, exclude_unset=True)


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ``ValidationError`` into ``<field-path>: <reason>`` lines."""
    messages: list[str] = []
    for err in exc.errors():
        path = ".".join(str(part) for part in err["loc"]) or "(root)"
        messages.append(f"{path}: {err['msg']}")
    return messages
