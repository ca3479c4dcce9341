"""Feature module sub-generators.

Each rich feature flag (auth, upload, email, payment, realtime) maps to one
async generator that writes its files and returns their relative paths.
Only auth writes files today; the others are registered extension points
that return an empty list.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from codepaladin.validator.models import PRD

from .projection import ProjectConfiguration
from .templates import TemplateRenderer

AUTH_SUPPORT_FILES: tuple[str, ...] = ("auth.ts", "jwt.ts", "middleware.ts", "validation.ts")
AUTH_API_FILES: tuple[str, ...] = ("login.ts", "register.ts", "logout.ts", "refresh.ts", "profile.ts")


@dataclass(frozen=True)
class FeatureContext:
    """Everything a feature generator may read."""

    prd: PRD
    config: ProjectConfiguration
    renderer: TemplateRenderer
    project_root: Path


FeatureGenerator = Callable[[FeatureContext], Awaitable[list[str]]]


async def generate_auth(ctx: FeatureContext) -> list[str]:
    """Copy the auth support library, plus API handlers for Next.js."""
    files: list[str] = []
    for name in AUTH_SUPPORT_FILES:
        rel = f"lib/auth/{name}"
        await ctx.renderer.copy_to_file(f"features/auth/{name}", ctx.project_root / rel)
        files.append(rel)

    if ctx.prd.tech_stack.framework == "next.js":
        for name in AUTH_API_FILES:
            rel = f"pages/api/auth/{name}"
            await ctx.renderer.copy_to_file(f"features/auth/api/{name}", ctx.project_root / rel)
            files.append(rel)

    return files


async def generate_upload(ctx: FeatureContext) -> list[str]:
    return []


async def generate_email(ctx: FeatureContext) -> list[str]:
    return []


async def generate_payment(ctx: FeatureContext) -> list[str]:
    return []


async def generate_realtime(ctx: FeatureContext) -> list[str]:
    return []


# Insertion order is generation order.
FEATURE_GENERATORS: dict[str, FeatureGenerator] = {
    "auth": generate_auth,
    "upload": generate_upload,
    "email": generate_email,
    "payment": generate_payment,
    "realtime": generate_realtime,
}


FEATURE_CATALOG: list[dict[str, Any]] = [
    {"name": "auth", "description": "User authentication and authorization", "dependencies": ["database"]},
    {"name": "admin", "description": "Administration dashboard", "dependencies": ["auth"]},
    {"name": "upload", "description": "File uploads", "dependencies": ["auth"]},
    {"name": "email", "description": "Transactional email", "dependencies": []},
    {"name": "payment", "description": "Payment integration", "dependencies": ["auth"]},
    {"name": "realtime", "description": "Realtime messaging", "dependencies": []},
    {"name": "analytics", "description": "Usage analytics", "dependencies": []},
    {"name": "i18n", "description": "Internationalization", "dependencies": []},
    {"name": "pwa", "description": "Progressive web app support", "dependencies": []},
    {"name": "seo", "description": "Search engine optimization", "dependencies": []},
]
