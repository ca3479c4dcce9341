"""PRD validation engine.

Structurally validates a PRD against the pydantic models, then applies the
business rules (stack compatibility, feature dependencies, pages,
environment naming).

Usage::

    from codepaladin.validator import PRDValidator

    validator = PRDValidator()
    prd = validator.validate(raw_dict)
"""

from codepaladin.validator.models import FEATURE_NAMES, PRD, PageDefinition, TechStack
from codepaladin.validator.rules import CompatibilityRule
from codepaladin.validator.validator import PRDValidator, ValidationReport, validate_prd

__all__ = [
    "FEATURE_NAMES",
    "PRD",
    "PageDefinition",
    "TechStack",
    "CompatibilityRule",
    "PRDValidator",
    "ValidationReport",
    "validate_prd",
]
