"""Main generation orchestrator.

Takes a validated ``PRD`` and materializes a complete project directory by
running a fixed sequence of stages.  Every stage returns the relative paths
it wrote; the orchestrator concatenates them into the manifest.  The first
failing stage stops the run, and files from completed stages stay on disk.
"""

from __future__ import annotations

import asyncio
import json
import time
from pathlib import Path
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field

from codepaladin.errors import GenerationError
from codepaladin.utils import console, print_error, print_stage_header
from codepaladin.validator.models import PRD, PageDefinition

from .content_filler import PageContentFiller
from .features import FEATURE_GENERATORS, FeatureContext
from .frameworks import DEFAULT_TEMPLATE_ID, get_profile
from .projection import ProjectConfiguration, project_configuration
from .templates import TemplateRenderer, TemplateStore, write_file


DEFAULT_LAYOUT = "DefaultLayout"

SKELETON_DIRS: tuple[str, ...] = (
    "components/ui",
    "components/layout",
    "components/forms",
    "lib/services",
    "lib/hooks",
    "lib/stores",
    "lib/utils",
    "lib/validations",
    "types",
    "styles",
)


# ---------------------------------------------------------------------------
# Built-in tooling defaults (used when the template store has no override)
# ---------------------------------------------------------------------------

DEFAULT_TSCONFIG: dict[str, Any] = {
    "compilerOptions": {
        "target": "ES2019",
        "module": "ESNext",
        "moduleResolution": "Node",
        "jsx": "preserve",
        "esModuleInterop": True,
        "strict": False,
        "skipLibCheck": True,
    },
    "include": ["**/*"],
}

DEFAULT_ESLINT: dict[str, Any] = {
    "env": {"browser": True, "es2021": True},
    "extends": ["eslint:recommended"],
    "parserOptions": {"ecmaVersion": "latest", "sourceType": "module"},
    "rules": {},
}

DEFAULT_TAILWIND = (
    "module.exports = {\n"
    "  content: ['./**/*.{js,ts,jsx,tsx}'],\n"
    "  theme: { extend: {} },\n"
    "  plugins: [],\n"
    "};\n"
)

DEFAULT_POSTCSS = (
    "module.exports = {\n"
    "  plugins: {\n"
    "    tailwindcss: {},\n"
    "    autoprefixer: {},\n"
    "  },\n"
    "};\n"
)

DEFAULT_PRETTIER = '{\n  "singleQuote": true,\n  "trailingComma": "all"\n}\n'

DEFAULT_GITIGNORE = "node_modules\ndist\n.env\n.next\n.DS_Store\n"


# ---------------------------------------------------------------------------
# Result model
# ---------------------------------------------------------------------------


class GenerationResult(BaseModel):
    """Outcome of one generation run."""

    success: bool
    message: str = Field(default="")
    files_created: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    duration: float = Field(default=0.0, description="Wall-clock seconds")


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Deterministic project generation pipeline.

    Stages, in order:

    1. ensure the destination root exists
    2. base project (``package.json`` and the framework config file)
    3. tooling configs (TypeScript, Tailwind/PostCSS, ESLint, Prettier, git)
    4. database schema and seed data
    5. feature modules
    6. pages
    7. static assets and the directory skeleton
    8. ``.env.example`` and ``README.md``

    Args:
        prd: A validated PRD.
        project_path: Destination project root.
        store: Template store; defaults to the packaged templates.
        content_filler: Optional filler for page bodies.  When omitted,
            pages are rendered from ``pages/page.tsx.j2``.
        verbose: Print a header per stage.
    """

    def __init__(
        self,
        prd: PRD,
        project_path: str | Path,
        store: TemplateStore | None = None,
        content_filler: PageContentFiller | None = None,
        verbose: bool = False,
    ) -> None:
        self.prd = prd
        self.project_root = Path(project_path)
        self.project_name = prd.project.name
        self.config: ProjectConfiguration = project_configuration(prd)
        self.profile = get_profile(prd.tech_stack.framework)
        self.renderer = TemplateRenderer(store)
        self.store = self.renderer.store
        self.content_filler = content_filler
        self.verbose = verbose

    # -- Public API --------------------------------------------------------

    async def generate(self) -> GenerationResult:
        """Run every stage and return the manifest or the first error."""
        start = time.monotonic()
        manifest: list[str] = []

        stages: list[tuple[str, Callable[[], Awaitable[list[str]]]]] = [
            ("Destination", self._ensure_root),
            ("Base project", self._generate_base_project),
            ("Tooling config", self._generate_config_files),
            ("Database schema", self._generate_database_schema),
            ("Feature modules", self._generate_features),
            ("Pages", self._generate_pages),
            ("Static assets", self._copy_static_files),
            ("Environment", self._generate_environment_config),
        ]

        if self.verbose:
            console.print(f"Generating project [bold]{self.project_name}[/bold] at {self.project_root}")
            console.print(
                f"Tech stack: {self.prd.tech_stack.framework} + {self.prd.tech_stack.ui_framework}"
            )

        try:
            for number, (name, stage) in enumerate(stages, start=1):
                if self.verbose:
                    print_stage_header(number, name)
                manifest.extend(await stage())
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            if self.verbose:
                print_error(f"Project generation failed: {message}")
            return GenerationResult(
                success=False,
                message=message,
                files_created=manifest,
                errors=[message],
                duration=time.monotonic() - start,
            )

        duration = time.monotonic() - start
        if self.verbose:
            console.print(f"Created {len(manifest)} files in {duration:.2f}s")
        return GenerationResult(
            success=True,
            message=f"Project {self.project_name} generated successfully",
            files_created=manifest,
            duration=duration,
        )

    # -- Helpers -----------------------------------------------------------

    async def _write(self, rel: str, content: str) -> str:
        await write_file(self.project_root / rel, content)
        return rel

    async def _render(self, template: str, rel: str, context: dict[str, Any]) -> str:
        await self.renderer.render_to_file(template, self.project_root / rel, context)
        return rel

    async def _copy(self, template: str, rel: str) -> str:
        await self.renderer.copy_to_file(template, self.project_root / rel)
        return rel

    def _project_context(self) -> dict[str, Any]:
        """Project metadata merged with the full derived configuration."""
        project = self.prd.project
        return {
            **self.config.as_context(),
            "project_name": self.project_name,
            "display_name": project.display_name,
            "description": project.description,
            "version": project.version,
            "author": project.author,
            "framework": self.prd.tech_stack.framework,
        }

    # -- Stage 1 -----------------------------------------------------------

    async def _ensure_root(self) -> list[str]:
        await asyncio.to_thread(self.project_root.mkdir, parents=True, exist_ok=True)
        return []

    # -- Stage 2 -----------------------------------------------------------

    async def _generate_base_project(self) -> list[str]:
        files = [await self._render("base/package.json.j2", "package.json", self._project_context())]

        if self.profile.has_config_file:
            files.append(
                await self._render(
                    self.profile.config_template,
                    self.profile.config_output,
                    self.config.as_context(),
                )
            )
        return files

    # -- Stage 3 -----------------------------------------------------------

    async def _config_file(self, name: str, default: str) -> str:
        """Write tooling file *name*, preferring a store-provided override.

        ``config/<name>`` is copied verbatim; ``config/<name>.j2`` is rendered
        with the configuration; otherwise *default* is written.
        """
        if self.store.exists(f"config/{name}"):
            return await self._copy(f"config/{name}", name)
        if self.store.exists(f"config/{name}.j2"):
            return await self._render(f"config/{name}.j2", name, self.config.as_context())
        return await self._write(name, default)

    async def _generate_config_files(self) -> list[str]:
        files = [await self._config_file("tsconfig.json", _json_text(DEFAULT_TSCONFIG))]

        if self.config.uses_tailwind:
            files.append(await self._config_file("tailwind.config.js", DEFAULT_TAILWIND))
            files.append(await self._config_file("postcss.config.js", DEFAULT_POSTCSS))

        files.append(await self._config_file(".eslintrc.json", _json_text(DEFAULT_ESLINT)))
        files.append(await self._config_file(".prettierrc", DEFAULT_PRETTIER))
        files.append(await self._config_file(".gitignore", DEFAULT_GITIGNORE))
        return files

    # -- Stage 4 -----------------------------------------------------------

    async def _generate_database_schema(self) -> list[str]:
        context = self.config.as_context()
        files = [await self._render("database/schema.prisma.j2", "prisma/schema.prisma", context)]

        if self.config.auth or self.config.template != DEFAULT_TEMPLATE_ID:
            files.append(await self._render("database/seed.ts.j2", "prisma/seed.ts", context))
        return files

    # -- Stage 5 -----------------------------------------------------------

    async def _generate_features(self) -> list[str]:
        ctx = FeatureContext(
            prd=self.prd,
            config=self.config,
            renderer=self.renderer,
            project_root=self.project_root,
        )
        files: list[str] = []
        for name, feature_generator in FEATURE_GENERATORS.items():
            if getattr(self.config, name):
                files.extend(await feature_generator(ctx))
        return files

    # -- Stage 6 -----------------------------------------------------------

    def page_path(self, route: str) -> str:
        """Relative output path of the page served at *route*."""
        return self.profile.page_path(route)

    async def _generate_pages(self) -> list[str]:
        files: list[str] = []
        for page in self.prd.pages:
            files.append(await self._generate_page(page))
        return files

    async def _generate_page(self, page: PageDefinition) -> str:
        rel = self.page_path(page.route)
        root = self.project_root.resolve()
        if not (root / rel).resolve().is_relative_to(root):
            raise GenerationError(
                f"Page route {page.route} resolves outside the project directory: {rel}",
                details={"route": page.route, "path": rel},
            )
        if self.content_filler is not None:
            content = await self.content_filler.fill(page, self.prd.tech_stack)
            return await self._write(rel, content)

        context = {
            "route": page.route,
            "name": page.name,
            "title": page.title,
            "description": page.description or "",
            "components": ", ".join(page.components),
            "component_list": list(page.components),
            "has_auth": page.auth or False,
            "public": page.public or False,
            "layout": page.layout or DEFAULT_LAYOUT,
            "framework": self.prd.tech_stack.framework,
        }
        return await self._render("pages/page.tsx.j2", rel, context)

    # -- Stage 7 -----------------------------------------------------------

    async def _copy_static_files(self) -> list[str]:
        files: list[str] = []
        if self.store.is_dir("static"):
            for name in self.store.list_files("static"):
                files.append(await self._copy(f"static/{name}", f"public/{name}"))

        for directory in SKELETON_DIRS:
            await asyncio.to_thread(
                (self.project_root / directory).mkdir, parents=True, exist_ok=True
            )
        return files

    # -- Stage 8 -----------------------------------------------------------

    def env_file_content(self) -> str:
        """``KEY=value`` per variable, then a blank line and ``KEY=`` per secret."""
        lines = [f"{key}={value}" for key, value in self.prd.environment.variables.items()]
        lines.append("")
        lines.append("# Secrets: fill these in before running the project")
        lines.extend(f"{secret}=" for secret in self.prd.environment.secrets)
        return "\n".join(lines) + "\n"

    async def _generate_environment_config(self) -> list[str]:
        files = [await self._write(".env.example", self.env_file_content())]

        stack = self.prd.tech_stack
        context = {
            **self._project_context(),
            "ui_framework": stack.ui_framework,
            "database": stack.database,
            "auth_provider": stack.auth,
            "deployment": stack.deployment,
            "pages": [page.model_dump() for page in self.prd.pages],
        }
        files.append(await self._render("README.md.j2", "README.md", context))
        return files


def _json_text(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2) + "\n"
