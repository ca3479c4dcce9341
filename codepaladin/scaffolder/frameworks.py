"""Per-framework generation profiles.

Each supported framework has exactly one :class:`FrameworkProfile` that says
which internal template identifier it maps to, which framework config file
(if any) the base stage renders, and where page files go.  Frameworks
without an entry fall back to :data:`DEFAULT_PROFILE`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_TEMPLATE_ID = "default"


def _next_page_path(route: str) -> str:
    if route == "/":
        return "pages/index.tsx"
    return f"pages{route}.tsx"


def _astro_page_path(route: str) -> str:
    if route == "/":
        return "src/pages/index.astro"
    return f"src/pages{route}.astro"


def _generic_page_path(route: str) -> str:
    if route == "/":
        return "src/pages/Home.tsx"
    return f"src/pages{route}.tsx"


@dataclass(frozen=True)
class FrameworkProfile:
    """Framework-specific choices made by the generator."""

    framework: str
    template_id: str
    page_path: Callable[[str], str]
    config_template: Optional[str] = None
    config_output: Optional[str] = None

    @property
    def has_config_file(self) -> bool:
        return self.config_template is not None and self.config_output is not None


FRAMEWORK_PROFILES: dict[str, FrameworkProfile] = {
    "next.js": FrameworkProfile(
        framework="next.js",
        template_id="nextjs",
        page_path=_next_page_path,
        config_template="base/next.config.js.j2",
        config_output="next.config.js",
    ),
    "astro": FrameworkProfile(
        framework="astro",
        template_id="astro",
        page_path=_astro_page_path,
        config_template="base/astro.config.mjs.j2",
        config_output="astro.config.mjs",
    ),
    "vue": FrameworkProfile(
        framework="vue",
        template_id="vue",
        page_path=_generic_page_path,
        config_template="base/vue.config.js.j2",
        config_output="vue.config.js",
    ),
    # React and Svelte need no framework config file at the base stage.
    "react": FrameworkProfile(
        framework="react",
        template_id="react",
        page_path=_generic_page_path,
    ),
    "svelte": FrameworkProfile(
        framework="svelte",
        template_id="svelte",
        page_path=_generic_page_path,
    ),
}

DEFAULT_PROFILE = FrameworkProfile(
    framework="",
    template_id=DEFAULT_TEMPLATE_ID,
    page_path=_generic_page_path,
)


def get_profile(framework: str) -> FrameworkProfile:
    """Return the profile for *framework*, or :data:`DEFAULT_PROFILE`."""
    return FRAMEWORK_PROFILES.get(framework, DEFAULT_PROFILE)


def template_id_for(framework: str) -> str:
    """Map a PRD framework value to its internal template identifier."""
    return get_profile(framework).template_id
