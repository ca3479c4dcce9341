"""Best-effort page bodies from a generative collaborator.

:class:`PageContentFiller` asks an external text generator for a page
component and falls back to a deterministic placeholder component whenever
the call fails, so a page file always exists.  The collaborator is anything
with an async ``generate(prompt, system=...)`` returning an object with
``success``, ``text`` and ``error`` attributes, such as
:class:`codepaladin.llm_client.OllamaClient`.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol

from codepaladin.utils import print_warning
from codepaladin.validator.models import PageDefinition, TechStack

_CODE_BLOCK_RE = re.compile(r"```(?:\w+\n)?([\s\S]+?)```")


class TextGenerator(Protocol):
    async def generate(self, prompt: str, model: str | None = None, system: str = "") -> Any:
        ...


def extract_code(response: str) -> str:
    """Return the first fenced code block in *response*, else the trimmed text."""
    match = _CODE_BLOCK_RE.search(response)
    return match.group(1).strip() if match else response.strip()


def fallback_component(page: PageDefinition, error_message: str) -> str:
    """Build the placeholder React component used when generation fails."""
    component_name = re.sub(r"[^a-zA-Z0-9]", "", page.name) or "Page"
    if component_name[0].isdigit():
        component_name = f"Page{component_name}"
    description = page.description or f"{page.title} Page"
    comment_error = error_message.replace("*/", "* /")
    return (
        "import React from 'react';\n"
        "\n"
        "/**\n"
        " * Auto-generated placeholder page.\n"
        f" * Content generation failed: {comment_error}\n"
        " * Implement this page by hand.\n"
        " */\n"
        f"export default function {component_name}() {{\n"
        "  return (\n"
        "    <main style={{ padding: '2rem', border: '1px dashed red' }}>\n"
        f"      <h1>{{{json.dumps(page.title)}}}</h1>\n"
        f"      <p>{{{json.dumps(description)}}}</p>\n"
        "      <p><em>This page is a placeholder because dynamic code generation failed.</em></p>\n"
        f"      <pre style={{{{ color: 'red' }}}}>{{{json.dumps('Error: ' + error_message)}}}</pre>\n"
        "    </main>\n"
        "  );\n"
        "}\n"
    )


class PageContentFiller:
    """Requests one page component body per page, with a guaranteed fallback."""

    def __init__(self, generator: TextGenerator, system_prompt: str = "") -> None:
        self.generator = generator
        self.system_prompt = system_prompt

    def build_prompt(self, page: PageDefinition, stack: TechStack) -> str:
        """Describe the page and its stack as one natural-language request."""
        description = page.description or ""
        return "\n".join([
            f"You are an expert {stack.framework} front-end developer.",
            "Your task is to write one page component for a new web application.",
            "",
            "# Tech stack",
            f"- Framework: {stack.framework}",
            f"- UI library: {stack.ui_framework}",
            f"- Database: {stack.database}",
            f"- Auth provider: {stack.auth}",
            "",
            "# Page requirements",
            f"- Page name: {page.name}",
            f"- Page title: {page.title}",
            f"- Route: {page.route}",
            f"- Description: {description}",
            f"- Implement basic versions of these components: {', '.join(page.components)}",
            f"- Requires authentication: {'yes' if page.auth else 'no'}",
            "",
            "# Instructions",
            "- Produce one complete, ready-to-use React (TSX) component file.",
            f"- Build the interface with {stack.ui_framework} components.",
            "- If authentication is required, check the signed-in state before rendering.",
            "- Output only code, with no surrounding explanation.",
        ])

    async def fill(self, page: PageDefinition, stack: TechStack) -> str:
        """Return generated component source, or the placeholder on any failure."""
        prompt = self.build_prompt(page, stack)
        try:
            response = await self.generator.generate(prompt, system=self.system_prompt)
        except Exception as exc:  # noqa: BLE001
            print_warning(f"Content generation failed for page '{page.name}': {exc}")
            return fallback_component(page, str(exc) or type(exc).__name__)

        if not getattr(response, "success", False):
            error = getattr(response, "error", None) or "content generator reported a failure"
            print_warning(f"Content generation failed for page '{page.name}': {error}")
            return fallback_component(page, error)

        text = getattr(response, "text", None)
        if not isinstance(text, str) or not text.strip():
            error = "content generator returned an empty or malformed response"
            print_warning(f"Content generation failed for page '{page.name}': {error}")
            return fallback_component(page, error)

        return extract_code(text)
