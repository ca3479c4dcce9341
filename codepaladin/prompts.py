"""System prompt loading for the generative collaborator.

Prompts are markdown files in a directory (``system_prompts/`` inside the
package by default).  The loader currently knows one prompt, the CodePaladin
meta prompt, which is passed as the system prompt to the content filler.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from codepaladin.errors import CodePaladinError
from codepaladin.utils import console, print_warning

DEFAULT_PROMPTS_DIR = Path(__file__).parent / "system_prompts"

META_PROMPT_ID = "codepaladin-meta-prompt"


class SystemPrompt(BaseModel):
    """A loaded system prompt."""

    id: str
    title: str
    content: str
    description: Optional[str] = None
    version: str = Field(default="1.0.0")
    last_updated: datetime


class SystemPromptLoader:
    """Loads system prompts from *prompts_dir* into memory."""

    def __init__(self, prompts_dir: str | Path | None = None, verbose: bool = False) -> None:
        self.prompts_dir = Path(prompts_dir) if prompts_dir is not None else DEFAULT_PROMPTS_DIR
        self.verbose = verbose
        self._prompts: dict[str, SystemPrompt] = {}

    def load(self) -> None:
        """Load every known prompt file.

        Raises:
            CodePaladinError: If the prompts directory does not exist.
        """
        if not self.prompts_dir.is_dir():
            raise CodePaladinError(
                f"System prompt directory does not exist: {self.prompts_dir}",
                details={"prompts_dir": str(self.prompts_dir)},
            )

        meta_path = self.prompts_dir / f"{META_PROMPT_ID}.md"
        if meta_path.is_file():
            prompt = SystemPrompt(
                id=META_PROMPT_ID,
                title="CodePaladin meta prompt",
                content=meta_path.read_text(encoding="utf-8"),
                description="Behaviour rules and output format for generated code",
                last_updated=datetime.fromtimestamp(meta_path.stat().st_mtime, tz=timezone.utc),
            )
            self._prompts[prompt.id] = prompt
            if self.verbose:
                console.print(f"Loaded system prompt: {prompt.title}")
        else:
            print_warning(f"System prompt file not found: {meta_path}")

    def reload(self) -> None:
        self._prompts.clear()
        self.load()

    def is_loaded(self) -> bool:
        return bool(self._prompts)

    def get(self, prompt_id: str) -> SystemPrompt | None:
        return self._prompts.get(prompt_id)

    def all(self) -> list[SystemPrompt]:
        return list(self._prompts.values())

    def meta_prompt(self) -> str:
        """Return the meta prompt text.

        Raises:
            CodePaladinError: If the meta prompt has not been loaded.
        """
        prompt = self.get(META_PROMPT_ID)
        if prompt is None:
            raise CodePaladinError("CodePaladin meta prompt is not loaded")
        return prompt.content

    def stats(self) -> dict[str, Any]:
        return {
            "total_prompts": len(self._prompts),
            "prompts_dir": str(self.prompts_dir),
            "loaded_prompts": list(self._prompts),
        }
