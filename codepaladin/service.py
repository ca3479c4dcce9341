"""CodePaladin service and command line.

:class:`CodePaladinService` is the request handler in front of the
validator and the generator.  A build request runs in a fixed order:

1. destination pre-check (reads only ``prd.project.name``)
2. PRD validation (structural pass, then business rules)
3. project generation through :class:`ProjectGenerator`

Failures never escape as exceptions; they come back as an unsuccessful
:class:`BuildProjectResponse` carrying the traceback.

Usage::

    codepaladin build prd.json --output ./projects
    codepaladin validate prd.yaml
    codepaladin sample > prd.json
"""

from __future__ import annotations

import asyncio
import json
import sys
import time
import traceback
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from rich.table import Table

from codepaladin import __version__
from codepaladin.config import Config, LLMConfig
from codepaladin.errors import CodePaladinError, GenerationError
from codepaladin.llm_client import OllamaClient
from codepaladin.prompts import SystemPromptLoader
from codepaladin.scaffolder import (
    FileSystemTemplateStore,
    PageContentFiller,
    ProjectGenerator,
)
from codepaladin.scaffolder.features import FEATURE_CATALOG
from codepaladin.utils import (
    console,
    format_duration,
    is_writable_dir,
    load_document,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)
from codepaladin.validator import PRDValidator, ValidationReport
from codepaladin.validator.models import (
    AUTH_PROVIDERS,
    DATABASES,
    DEPLOYMENT_TARGETS,
    FRAMEWORKS,
    UI_FRAMEWORKS,
)

# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class BuildProjectRequest(_WireModel):
    """A build request.  ``prd`` is the raw, not yet validated document."""

    prd: Any
    output_path: Optional[str] = Field(default=None, alias="outputPath")
    overwrite: Optional[bool] = Field(
        default=None, description="Overrides the service's allow_overwrite when set"
    )


class BuildProjectData(_WireModel):
    project_path: str = Field(default="", alias="projectPath")
    files_created: list[str] = Field(default_factory=list, alias="filesCreated")
    duration: float = Field(default=0.0, description="Wall-clock seconds")


class BuildProjectResponse(_WireModel):
    success: bool
    message: str
    data: Optional[BuildProjectData] = None
    error: Optional[str] = Field(default=None, description="Diagnostic traceback on failure")


class HealthCheck(_WireModel):
    name: str
    status: Literal["ok", "warning", "error"]
    message: Optional[str] = None


class HealthReport(_WireModel):
    healthy: bool
    checks: list[HealthCheck] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CodePaladinService:
    """Front door for PRD validation and project generation.

    Attributes:
        config: Service configuration.
        validator: Shared PRD validator.
        prompts: System prompt loader, loaded lazily.
    """

    name = "CodePaladin"
    description = "Deterministic project generation from a validated PRD"
    capabilities = (
        "PRD validation",
        "Project generation",
        "Template system",
        "Multiple tech stacks",
        "Composable feature modules",
    )

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.validator = PRDValidator()
        self.prompts = SystemPromptLoader(self.config.prompts_path, verbose=self.config.verbose)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    async def build_project(self, request: BuildProjectRequest | dict[str, Any]) -> BuildProjectResponse:
        """Validate the request's PRD and generate the project.

        The overwrite flag on the request, when given, takes precedence over
        ``config.allow_overwrite``.
        """
        start = time.monotonic()
        project_path: Path | None = None
        files_created: list[str] = []

        try:
            if not isinstance(request, BuildProjectRequest):
                request = BuildProjectRequest.model_validate(request)
            output_root = Path(request.output_path) if request.output_path else Path(self.config.output_path)
            overwrite = request.overwrite if request.overwrite is not None else self.config.allow_overwrite

            name = _raw_project_name(request.prd)
            if name is not None:
                project_path = output_root / name
                if project_path.exists() and not overwrite:
                    raise GenerationError(
                        f"Project directory already exists: {project_path}. "
                        "Set overwrite to replace it.",
                        details={"project_path": str(project_path)},
                    )

            prd = self.validator.validate(request.prd)
            project_path = output_root / prd.project.name

            generator = ProjectGenerator(
                prd,
                project_path,
                store=FileSystemTemplateStore(self.config.templates_path),
                content_filler=await self._content_filler(),
                verbose=self.config.verbose,
            )
            result = await generator.generate()
            files_created = result.files_created
            if not result.success:
                raise GenerationError(
                    result.message or "Project generation failed",
                    details={"errors": result.errors},
                )

            duration = time.monotonic() - start
            if self.config.verbose:
                print_success(f"Project {prd.project.name} generated in {format_duration(duration)}")
            return BuildProjectResponse(
                success=True,
                message=f"Project {prd.project.name} generated successfully",
                data=BuildProjectData(
                    project_path=str(project_path),
                    files_created=files_created,
                    duration=duration,
                ),
            )
        except Exception as exc:
            if self.config.verbose:
                print_error(f"Project build failed: {exc}")
            return BuildProjectResponse(
                success=False,
                message=str(exc) or type(exc).__name__,
                error=traceback.format_exc(),
                data=BuildProjectData(
                    project_path=str(project_path) if project_path is not None else "",
                    files_created=files_created,
                    duration=time.monotonic() - start,
                ),
            )

    async def _content_filler(self) -> PageContentFiller | None:
        """Return an LLM-backed filler when enabled and reachable."""
        llm: LLMConfig = self.config.llm
        if not llm.enabled:
            return None

        client = OllamaClient(base_url=llm.url, timeout=llm.timeout, model=llm.model)
        if not await client.is_available():
            print_warning(f"LLM server at {llm.url} is not reachable; rendering pages from templates.")
            return None

        self._ensure_prompts()
        system_prompt = self.prompts.meta_prompt() if self.prompts.is_loaded() else ""
        return PageContentFiller(client, system_prompt=system_prompt)

    # ------------------------------------------------------------------
    # Validation and introspection
    # ------------------------------------------------------------------

    def validate_prd(self, candidate: Any) -> ValidationReport:
        """Validate *candidate* without touching storage."""
        return self.validator.validate_or_report(candidate)

    def get_supported_tech_stack(self) -> dict[str, list[str]]:
        return {
            "frameworks": list(FRAMEWORKS),
            "ui_frameworks": list(UI_FRAMEWORKS),
            "databases": list(DATABASES),
            "auth_providers": list(AUTH_PROVIDERS),
            "deployment_targets": list(DEPLOYMENT_TARGETS),
        }

    def get_available_features(self) -> list[dict[str, Any]]:
        return [
            {**feature, "dependencies": list(feature["dependencies"])}
            for feature in FEATURE_CATALOG
        ]

    def generate_sample_prd(self) -> dict[str, Any]:
        return PRDValidator.generate_sample_prd()

    def get_service_info(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": __version__,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "config": self.config.model_dump(mode="json"),
        }

    def update_config(self, **changes: Any) -> Config:
        """Merge *changes* into the configuration and revalidate it.

        A nested ``llm`` mapping is merged key by key.
        """
        data = self.config.model_dump()
        llm_changes = changes.pop("llm", None)
        if isinstance(llm_changes, LLMConfig):
            llm_changes = llm_changes.model_dump()
        if llm_changes:
            data["llm"] = {**data["llm"], **llm_changes}
        data.update(changes)

        previous_prompts = self.config.prompts_path
        self.config = Config.model_validate(data)
        if self.config.prompts_path != previous_prompts:
            self.prompts = SystemPromptLoader(self.config.prompts_path, verbose=self.config.verbose)
        return self.config

    # ------------------------------------------------------------------
    # Health and system prompts
    # ------------------------------------------------------------------

    async def health_check(self) -> HealthReport:
        """Check templates, output directory, schema and system prompts.

        System prompts are optional, so a failure there is a warning and does
        not make the service unhealthy.
        """
        checks: list[HealthCheck] = []

        templates_path = Path(self.config.templates_path)
        if templates_path.is_dir():
            checks.append(HealthCheck(name="templates", status="ok"))
        else:
            checks.append(HealthCheck(
                name="templates",
                status="error",
                message=f"Template directory does not exist: {templates_path}",
            ))

        output_path = Path(self.config.output_path)
        if await asyncio.to_thread(is_writable_dir, output_path):
            checks.append(HealthCheck(name="output_directory", status="ok"))
        else:
            checks.append(HealthCheck(
                name="output_directory",
                status="error",
                message=f"Output directory is not writable: {output_path}",
            ))

        try:
            self.validator.load_schema_document()
            checks.append(HealthCheck(name="prd_schema", status="ok"))
        except CodePaladinError as exc:
            checks.append(HealthCheck(name="prd_schema", status="error", message=exc.message))

        try:
            self.prompts.reload()
        except CodePaladinError as exc:
            checks.append(HealthCheck(name="system_prompts", status="warning", message=exc.message))
        else:
            if self.prompts.is_loaded():
                checks.append(HealthCheck(name="system_prompts", status="ok"))
            else:
                checks.append(HealthCheck(
                    name="system_prompts",
                    status="warning",
                    message="No system prompts found",
                ))

        healthy = all(check.status != "error" for check in checks)
        return HealthReport(healthy=healthy, checks=checks)

    def _ensure_prompts(self) -> None:
        if self.prompts.is_loaded():
            return
        try:
            self.prompts.load()
        except CodePaladinError as exc:
            print_warning(exc.message)

    def get_system_prompt_info(self) -> dict[str, Any]:
        self._ensure_prompts()
        return {
            "loaded": self.prompts.is_loaded(),
            "prompts": [prompt.title for prompt in self.prompts.all()],
            "stats": self.prompts.stats(),
        }


def _raw_project_name(prd: Any) -> str | None:
    """Read ``project.name`` from an unvalidated PRD, if it is a string."""
    if not isinstance(prd, dict):
        return None
    project = prd.get("project")
    if not isinstance(project, dict):
        return None
    name = project.get("name")
    if not isinstance(name, str) or not name:
        return None
    return name


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _load_prd_file(path_str: str) -> Any:
    path = Path(path_str)
    if not path.is_file():
        print_error(f"Error: PRD file not found: {path}")
        sys.exit(1)
    try:
        return load_document(path)
    except (OSError, ValueError) as exc:
        print_error(f"Error: cannot parse {path}: {exc}")
        sys.exit(1)


def _print_list_table(title: str, columns: list[str], rows: list[list[str]]) -> None:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    console.print(table)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``codepaladin``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="codepaladin",
        description="CodePaladin -- deterministic project generation from a PRD",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  codepaladin sample > prd.json\n"
            "  codepaladin validate prd.json\n"
            "  codepaladin build prd.json -o ./projects\n"
            "  codepaladin build prd.yaml -o ./projects --overwrite --llm\n"
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Print progress per stage")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Generate a project from a PRD file")
    build_parser.add_argument("prd", help="Path to the PRD (.json, .yaml or .yml)")
    build_parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory the project folder is created in (default: CODEPALADIN_OUTPUT_PATH or .)",
    )
    build_parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Generate into an existing project directory",
    )
    build_parser.add_argument("--llm", action="store_true", help="Fill page bodies through the LLM")

    validate_parser = subparsers.add_parser("validate", help="Validate a PRD file")
    validate_parser.add_argument("prd", help="Path to the PRD (.json, .yaml or .yml)")

    subparsers.add_parser("sample", help="Print a valid sample PRD as JSON")
    subparsers.add_parser("stack", help="List the supported tech stack values")
    subparsers.add_parser("features", help="List the available feature modules")
    subparsers.add_parser("health", help="Run the service health checks")
    subparsers.add_parser("info", help="Show service information")

    args = parser.parse_args(argv)

    config = Config.from_env()
    if args.verbose:
        config.verbose = True
    if args.command == "build" and args.llm:
        config.llm.enabled = True
    service = CodePaladinService(config)

    if args.command == "build":
        raw = _load_prd_file(args.prd)
        request = BuildProjectRequest(prd=raw, output_path=args.output, overwrite=args.overwrite)
        response = asyncio.run(service.build_project(request))
        if not response.success:
            print_error(f"Build failed: {response.message}")
            sys.exit(1)
        data = response.data or BuildProjectData()
        print_summary_table(
            {
                "Project path": data.project_path,
                "Files created": len(data.files_created),
                "Duration": format_duration(data.duration),
            },
            title="Build Summary",
        )
        print_success(response.message)

    elif args.command == "validate":
        report = service.validate_prd(_load_prd_file(args.prd))
        if not report.valid:
            print_error("PRD is invalid:")
            for error in report.errors or []:
                console.print(f"  - {error}", markup=False)
            sys.exit(1)
        print_success("PRD is valid")

    elif args.command == "sample":
        console.print_json(json.dumps(service.generate_sample_prd()))

    elif args.command == "stack":
        stack = service.get_supported_tech_stack()
        _print_list_table(
            "Supported Tech Stack",
            ["Category", "Values"],
            [[category, ", ".join(values)] for category, values in stack.items()],
        )

    elif args.command == "features":
        _print_list_table(
            "Available Features",
            ["Feature", "Description", "Depends on"],
            [
                [f["name"], f["description"], ", ".join(f["dependencies"]) or "-"]
                for f in service.get_available_features()
            ],
        )

    elif args.command == "health":
        report = asyncio.run(service.health_check())
        _print_list_table(
            "Health",
            ["Check", "Status", "Message"],
            [[c.name, c.status, c.message or ""] for c in report.checks],
        )
        if not report.healthy:
            print_error("Service is unhealthy")
            sys.exit(1)
        print_success("Service is healthy")

    elif args.command == "info":
        info = service.get_service_info()
        print_summary_table(
            {
                "Name": info["name"],
                "Version": info["version"],
                "Description": info["description"],
                "Capabilities": ", ".join(info["capabilities"]),
                "Templates": info["config"]["templates_path"],
                "Output": info["config"]["output_path"],
            },
            title="CodePaladin",
        )


if __name__ == "__main__":
    main()
