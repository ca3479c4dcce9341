"""PRD validator: structural pass followed by the business-rule pass.

The structural pass is pydantic model validation and reports every violation
at once.  The business pass only runs on a structurally valid document and
evaluates every configured rule, so the same input always produces the same
error set.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, ValidationError

from codepaladin.errors import PRDValidationError
from codepaladin.utils import print_warning

from . import rules
from .models import PRD, format_validation_errors

_SCHEMA_PATH = Path(__file__).parent / "schema" / "prd-schema.json"


class ValidationReport(BaseModel):
    """Non-raising summary of a validation attempt."""

    valid: bool
    errors: Optional[list[str]] = Field(default=None)
    warnings: list[str] = Field(default_factory=list)


class PRDValidator:
    """Validates raw PRD input against the schema and the business rules.

    Args:
        stack_rules: Stack compatibility table.  Defaults to the shared,
            extendable :data:`rules.STACK_RULES` list.
        feature_rules: Feature compatibility table.  Defaults to
            :data:`rules.FEATURE_RULES`.
        item_checks: Per-item checks (pages, environment).
        warn: Callable receiving each non-fatal warning.  Defaults to a
            yellow console line.
        schema_path: Location of the JSON-Schema document.
    """

    def __init__(
        self,
        stack_rules: list[rules.CompatibilityRule] | None = None,
        feature_rules: list[rules.CompatibilityRule] | None = None,
        item_checks: list[Callable[[PRD], list[str]]] | None = None,
        warn: Callable[[str], None] | None = None,
        schema_path: str | Path | None = None,
    ) -> None:
        self.stack_rules = rules.STACK_RULES if stack_rules is None else stack_rules
        self.feature_rules = rules.FEATURE_RULES if feature_rules is None else feature_rules
        self.item_checks = rules.ITEM_CHECKS if item_checks is None else item_checks
        self._warn = warn or print_warning
        self.schema_path = Path(schema_path) if schema_path else _SCHEMA_PATH
        self.warnings: list[str] = []

    # -- Validation --------------------------------------------------------

    def validate(self, raw: Any) -> PRD:
        """Validate *raw* and return the immutable :class:`PRD`.

        Raises:
            PRDValidationError: With one message per violation.
        """
        self.warnings = []
        try:
            prd = PRD.model_validate(raw)
        except ValidationError as exc:
            messages = format_validation_errors(exc)
            raise PRDValidationError(
                f"PRD validation failed: {'; '.join(messages)}",
                messages,
                details=exc.errors(include_url=False),
            ) from None

        outcome = self.check_business_rules(prd)
        for warning in outcome.warnings:
            self.warnings.append(warning)
            self._warn(f"Warning: {warning}")

        if outcome.errors:
            raise PRDValidationError(
                f"PRD validation failed: {'; '.join(outcome.errors)}",
                outcome.errors,
            )
        return prd

    def check_business_rules(self, prd: PRD) -> rules.RuleOutcome:
        """Run every business rule against a structurally valid PRD."""
        outcome = rules.RuleOutcome()
        outcome.extend(rules.evaluate_rules(prd, self.stack_rules))
        outcome.extend(rules.evaluate_rules(prd, self.feature_rules))
        for check in self.item_checks:
            outcome.errors.extend(check(prd))
        return outcome

    def validate_or_report(self, raw: Any) -> ValidationReport:
        """Like :meth:`validate` but returns a :class:`ValidationReport`."""
        try:
            self.validate(raw)
        except PRDValidationError as exc:
            return ValidationReport(valid=False, errors=exc.errors, warnings=list(self.warnings))
        return ValidationReport(valid=True, warnings=list(self.warnings))

    # -- Reference documents -----------------------------------------------

    def load_schema_document(self) -> dict[str, Any]:
        """Return the canonical JSON-Schema document for the PRD format."""
        try:
            return json.loads(self.schema_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PRDValidationError(f"Unable to load PRD schema document: {exc}") from exc

    @staticmethod
    def generate_sample_prd(created_at: str | None = None) -> dict[str, Any]:
        """Return a known-valid PRD, useful for documentation and tests."""
        return {
            "project": {
                "name": "my-awesome-app",
                "displayName": "My Awesome App",
                "description": "A modern web application generated by CodePaladin",
                "version": "1.0.0",
                "author": "Developer",
            },
            "techStack": {
                "framework": "next.js",
                "uiFramework": "tailwind-radix",
                "database": "postgresql",
                "auth": "supabase",
                "deployment": "vercel",
            },
            "features": {
                "auth": True,
                "admin": False,
                "upload": True,
                "email": True,
                "payment": False,
                "realtime": False,
                "analytics": True,
                "i18n": False,
                "pwa": False,
                "seo": True,
            },
            "pages": [
                {
                    "route": "/",
                    "name": "HomePage",
                    "title": "Home",
                    "description": "Application landing page",
                    "layout": "DefaultLayout",
                    "components": ["Hero", "Features", "CTA"],
                    "public": True,
                },
                {
                    "route": "/dashboard",
                    "name": "DashboardPage",
                    "title": "Dashboard",
                    "description": "Signed-in user dashboard",
                    "layout": "AuthLayout",
                    "components": ["UserStats", "RecentActivity"],
                    "auth": True,
                },
            ],
            "environment": {
                "variables": {
                    "NEXT_PUBLIC_APP_URL": "http://localhost:3000",
                    "NEXT_PUBLIC_APP_NAME": "My Awesome App",
                },
                "secrets": [
                    "DATABASE_URL",
                    "SUPABASE_URL",
                    "SUPABASE_ANON_KEY",
                    "NEXTAUTH_SECRET",
                ],
            },
            "createdAt": created_at or datetime.now(timezone.utc).isoformat(),
            "version": "1.0.0",
        }


def validate_prd(raw: Any) -> PRD:
    """Validate *raw* with the default rule tables."""
    return PRDValidator().validate(raw)
