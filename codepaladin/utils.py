"""Shared helpers: the Rich console, PRD file loading and small formatters.

All console output in CodePaladin goes through :data:`console` so tests and
the CLI see the same stream.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()

YAML_SUFFIXES = (".yaml", ".yml")


# ---------------------------------------------------------------------------
# PRD files
# ---------------------------------------------------------------------------


def load_document(path: str | Path) -> Any:
    """Parse a PRD file.  ``.yaml``/``.yml`` go through PyYAML, anything else is JSON.

    The parsed value is returned as is; shape checks belong to the validator.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not valid JSON or YAML.
    """
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() in YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid YAML: {exc}") from exc
    return json.loads(text)


def is_writable_dir(path: str | Path) -> bool:
    """Return ``True`` if *path* exists (or can be created) and accepts a file write."""
    dir_path = Path(path)
    probe = dir_path / ".codepaladin-write-probe"
    try:
        dir_path.mkdir(parents=True, exist_ok=True)
        probe.write_text("", encoding="utf-8")
        probe.unlink()
    except OSError:
        return False
    return True


def format_duration(seconds: float) -> str:
    """Render a run duration: ``"850ms"``, ``"3.7s"`` or ``"2m 5s"``."""
    if seconds <= 0:
        return "0ms"
    if seconds < 1:
        return f"{round(seconds * 1000)}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------


def print_stage_header(stage: int, name: str) -> None:
    """Print a rule marking the start of a generation stage."""
    console.print(Rule(f"[bold cyan]{stage}. {escape(name)}[/bold cyan]", style="cyan", align="left"))


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print *data* as a two-column label/value table."""
    table = Table(title=title, show_header=False, title_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")
    for label, value in data.items():
        table.add_row(label, str(value))
    console.print(table)


def _print_styled(style: str, message: str) -> None:
    # User data (paths, PRD values) may contain square brackets.
    console.print(f"[{style}]{escape(message)}[/{style}]")


def print_success(message: str) -> None:
    _print_styled("bold green", message)


def print_error(message: str) -> None:
    _print_styled("bold red", message)


def print_warning(message: str) -> None:
    _print_styled("bold yellow", message)
