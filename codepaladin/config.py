"""CodePaladin configuration.

Typed configuration for the service and the CLI.  All settings use Pydantic
v2 models so they are validated at construction time and serialise to/from
JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from codepaladin.prompts import DEFAULT_PROMPTS_DIR
from codepaladin.scaffolder.templates import DEFAULT_TEMPLATE_DIR

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip().lower() in _TRUTHY


class LLMConfig(BaseModel):
    """Configuration for the optional Ollama-compatible content filler."""

    enabled: bool = Field(default=False, description="Fill page bodies through the LLM")
    url: str = Field(default="http://localhost:11434")
    model: str = Field(default="qwen2.5-coder:14b")
    timeout: int = Field(default=120, ge=10, description="Per-request timeout in seconds")


class Config(BaseModel):
    """Global CodePaladin configuration.

    ``allow_overwrite`` is the service default; a build request that sets its
    own ``overwrite`` flag takes precedence over it.
    """

    templates_path: Path = Field(default=DEFAULT_TEMPLATE_DIR)
    output_path: Path = Field(default=Path("."))
    prompts_path: Path = Field(default=DEFAULT_PROMPTS_DIR)
    allow_overwrite: bool = Field(default=False)
    verbose: bool = Field(default=False)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file. Defaults to
                ``<output_path>/.codepaladin/config.json``.

        Returns:
            The path where the file was written.
        """
        target = path or (self.output_path / ".codepaladin" / "config.json")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CODEPALADIN_TEMPLATES_PATH, CODEPALADIN_OUTPUT_PATH,
            CODEPALADIN_PROMPTS_PATH, CODEPALADIN_ALLOW_OVERWRITE,
            CODEPALADIN_VERBOSE, CODEPALADIN_LLM_ENABLED, CODEPALADIN_LLM_URL,
            CODEPALADIN_LLM_MODEL, CODEPALADIN_LLM_TIMEOUT.
        """
        llm_kwargs: dict[str, Any] = {}
        enabled = _env_flag("CODEPALADIN_LLM_ENABLED")
        if enabled is not None:
            llm_kwargs["enabled"] = enabled
        if os.environ.get("CODEPALADIN_LLM_URL"):
            llm_kwargs["url"] = os.environ["CODEPALADIN_LLM_URL"]
        if os.environ.get("CODEPALADIN_LLM_MODEL"):
            llm_kwargs["model"] = os.environ["CODEPALADIN_LLM_MODEL"]
        if os.environ.get("CODEPALADIN_LLM_TIMEOUT"):
            llm_kwargs["timeout"] = int(os.environ["CODEPALADIN_LLM_TIMEOUT"])

        kwargs: dict[str, Any] = {}
        if os.environ.get("CODEPALADIN_TEMPLATES_PATH"):
            kwargs["templates_path"] = Path(os.environ["CODEPALADIN_TEMPLATES_PATH"])
        if os.environ.get("CODEPALADIN_OUTPUT_PATH"):
            kwargs["output_path"] = Path(os.environ["CODEPALADIN_OUTPUT_PATH"])
        if os.environ.get("CODEPALADIN_PROMPTS_PATH"):
            kwargs["prompts_path"] = Path(os.environ["CODEPALADIN_PROMPTS_PATH"])
        for field_name, env_name in (
            ("allow_overwrite", "CODEPALADIN_ALLOW_OVERWRITE"),
            ("verbose", "CODEPALADIN_VERBOSE"),
        ):
            flag = _env_flag(env_name)
            if flag is not None:
                kwargs[field_name] = flag

        return cls(llm=LLMConfig(**llm_kwargs), **kwargs)
