"""Exception hierarchy shared by the validator, scaffolder and service layers."""

from __future__ import annotations

from typing import Any


class CodePaladinError(Exception):
    """Base error carrying a machine-readable ``code`` and optional details."""

    code = "CODEPALADIN_ERROR"

    def __init__(self, message: str, details: Any = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class PRDValidationError(CodePaladinError):
    """Raised when a PRD fails the structural or business-rule pass.

    ``errors`` holds every individual violation, in the order it was found.
    """

    code = "PRD_VALIDATION_ERROR"

    def __init__(self, message: str, errors: list[str] | None = None, details: Any = None) -> None:
        self.errors = list(errors) if errors else [message]
        super().__init__(message, details)


class TemplateError(CodePaladinError):
    """Raised when an expected template or source asset is missing."""

    code = "TEMPLATE_ERROR"


class GenerationError(CodePaladinError):
    """Raised when a generation run cannot start or finishes unsuccessfully."""

    code = "GENERATION_ERROR"
