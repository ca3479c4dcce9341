"""Template storage and Jinja2 rendering for project generation.

Template assets live behind the :class:`TemplateStore` interface so the
generator never touches template storage directly.  Two stores ship:
:class:`FileSystemTemplateStore` (the ``templates/`` directory next to this
module by default) and :class:`InMemoryTemplateStore` (handy in tests).

:class:`TemplateRenderer` loads ``.j2`` templates through a store, renders
them with a context dictionary, and writes results to disk, creating parent
directories as needed.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any, Callable, Protocol

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateNotFound

from codepaladin.errors import TemplateError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class TemplateStore(Protocol):
    """Lookup interface for template assets, addressed by relative POSIX name."""

    def resolve(self, name: str) -> str:
        """Return the text of *name*; raise ``TemplateError`` if missing."""
        ...

    def read_bytes(self, name: str) -> bytes:
        """Return the raw bytes of *name*; raise ``TemplateError`` if missing."""
        ...

    def exists(self, name: str) -> bool:
        """Return ``True`` if *name* is a stored file."""
        ...

    def is_dir(self, name: str) -> bool:
        """Return ``True`` if files are stored under *name*."""
        ...

    def list_files(self, prefix: str) -> list[str]:
        """Sorted file names under *prefix*, relative to it."""
        ...


class FileSystemTemplateStore:
    """Template store backed by a directory on disk."""

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root) if root is not None else DEFAULT_TEMPLATE_DIR

    def _path(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def is_dir(self, name: str) -> bool:
        return self._path(name).is_dir()

    def resolve(self, name: str) -> str:
        return self.read_bytes(name).decode("utf-8")

    def read_bytes(self, name: str) -> bytes:
        path = self._path(name)
        if not path.is_file():
            raise TemplateError(f"Template file not found: {path}", details={"name": name})
        return path.read_bytes()

    def list_files(self, prefix: str) -> list[str]:
        base = self._path(prefix)
        if not base.is_dir():
            return []
        return sorted(p.relative_to(base).as_posix() for p in base.rglob("*") if p.is_file())


class InMemoryTemplateStore:
    """Template store backed by a ``{name: content}`` mapping."""

    def __init__(self, files: dict[str, str | bytes] | None = None) -> None:
        self.files: dict[str, str | bytes] = {
            name.strip("/"): content for name, content in (files or {}).items()
        }

    def exists(self, name: str) -> bool:
        return name.strip("/") in self.files

    def is_dir(self, name: str) -> bool:
        prefix = name.strip("/") + "/"
        return any(key.startswith(prefix) for key in self.files)

    def resolve(self, name: str) -> str:
        content = self._get(name)
        if isinstance(content, bytes):
            return content.decode("utf-8")
        return content

    def read_bytes(self, name: str) -> bytes:
        content = self._get(name)
        if isinstance(content, str):
            return content.encode("utf-8")
        return content

    def list_files(self, prefix: str) -> list[str]:
        base = prefix.strip("/") + "/"
        return sorted(key[len(base):] for key in self.files if key.startswith(base))

    def _get(self, name: str) -> str | bytes:
        key = name.strip("/")
        if key not in self.files:
            raise TemplateError(f"Template file not found: {key}", details={"name": key})
        return self.files[key]


class _StoreLoader(BaseLoader):
    """Jinja2 loader that reads template sources from a ``TemplateStore``."""

    def __init__(self, store: TemplateStore) -> None:
        self.store = store

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str | None, Callable[[], bool]]:
        if not self.store.exists(template):
            raise TemplateNotFound(template)
        return self.store.resolve(template), None, lambda: True


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project generation.

    Undefined template variables are errors, so a context missing a key
    fails loudly instead of silently rendering an empty string.
    """

    def __init__(self, store: TemplateStore | None = None) -> None:
        self.store: TemplateStore = store if store is not None else FileSystemTemplateStore()
        self.env = Environment(
            loader=_StoreLoader(self.store),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["component_name"] = _component_name_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Name relative to the store root (e.g.
                ``"base/package.json.j2"``).
            context: Dictionary of variables available inside the template.

        Raises:
            TemplateError: If the template does not exist.
        """
        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as exc:
            raise TemplateError(
                f"Template file not found: {template_path}", details={"name": template_path}
            ) from exc
        return template.render(**context)

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.
        """
        content = self.render(template_path, context)
        return await write_file(output_path, content)

    async def copy_to_file(self, template_path: str, output_path: str | Path) -> Path:
        """Copy a stored asset verbatim (no rendering) to *output_path*."""
        data = self.store.read_bytes(template_path)
        out = Path(output_path)
        await asyncio.to_thread(_write_bytes, out, data)
        return out


async def write_file(output_path: str | Path, content: str) -> Path:
    """Write *content* to *output_path*, creating parent directories."""
    out = Path(output_path)
    await asyncio.to_thread(_write_file, out, content)
    return out


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _component_name_filter(value: str) -> str:
    """Turn a page name into a JavaScript identifier: ``user-profile`` -> ``UserProfile``.

    Words already in mixed case keep their inner capitals.  A name that is
    empty or starts with a digit gets a ``Page`` prefix (``404`` -> ``Page404``).
    """
    parts = re.split(r"[^a-zA-Z0-9]+", value)
    name = "".join(word[:1].upper() + word[1:] for word in parts if word)
    if not name or name[0].isdigit():
        name = f"Page{name}"
    return name


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
