"""Business rules applied to a structurally valid PRD.

Stack and feature compatibility are plain ordered tables of
:class:`CompatibilityRule` entries.  Page and environment rules need to
report per-item messages, so they are functions returning a list of
violations.  Every rule in every table is evaluated; nothing short-circuits.

Extending the rule set::

    from codepaladin.validator import rules

    rules.STACK_RULES.append(
        rules.CompatibilityRule(
            name="svelte-mui",
            predicate=lambda prd: prd.tech_stack.framework == "svelte"
            and prd.tech_stack.ui_framework == "mui",
            message="Tech stack incompatibility: Svelte does not support MUI",
        )
    )
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from codepaladin.scaffolder.frameworks import get_profile

from .models import PRD

COMPONENT_NAME_RE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
ENV_NAME_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$")


@dataclass(frozen=True)
class CompatibilityRule:
    """A single ``(predicate, message)`` pair.

    ``predicate`` returns ``True`` when the PRD *violates* the rule.  Rules
    with ``fatal=False`` produce warnings instead of errors.
    """

    name: str
    predicate: Callable[[PRD], bool]
    message: str
    fatal: bool = True


@dataclass
class RuleOutcome:
    """Messages collected from one evaluation pass."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def extend(self, other: "RuleOutcome") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

STACK_RULES: list[CompatibilityRule] = [
    CompatibilityRule(
        name="astro-chakra",
        predicate=lambda prd: prd.tech_stack.framework == "astro"
        and prd.tech_stack.ui_framework == "chakra-ui",
        message="Tech stack incompatibility: Astro does not support Chakra UI",
    ),
    CompatibilityRule(
        name="vue-tailwind",
        predicate=lambda prd: prd.tech_stack.framework == "vue"
        and prd.tech_stack.ui_framework.startswith("tailwind"),
        message=(
            "Tech stack incompatibility: Vue should use Element Plus or "
            "Ant Design Vue instead of Tailwind"
        ),
    ),
    CompatibilityRule(
        name="nextauth-requires-next",
        predicate=lambda prd: prd.tech_stack.auth == "nextauth"
        and prd.tech_stack.framework != "next.js",
        message="Tech stack incompatibility: NextAuth can only be used with Next.js",
    ),
]

FEATURE_RULES: list[CompatibilityRule] = [
    CompatibilityRule(
        name="auth-needs-provider",
        predicate=lambda prd: prd.features.auth and prd.tech_stack.auth == "none",
        message="The auth feature is enabled but techStack.auth is 'none'",
    ),
    CompatibilityRule(
        name="admin-needs-auth",
        predicate=lambda prd: prd.features.admin and not prd.features.auth,
        message="The admin feature requires the auth feature to be enabled",
    ),
    CompatibilityRule(
        name="payment-without-auth",
        predicate=lambda prd: prd.features.payment and not prd.features.auth,
        message="The payment feature is enabled without auth; enabling auth is strongly recommended",
        fatal=False,
    ),
]


def evaluate_rules(prd: PRD, rules: list[CompatibilityRule]) -> RuleOutcome:
    """Evaluate every rule in *rules* against *prd*, in table order."""
    outcome = RuleOutcome()
    for rule in rules:
        if not rule.predicate(prd):
            continue
        if rule.fatal:
            outcome.errors.append(rule.message)
        else:
            outcome.warnings.append(rule.message)
    return outcome


# ---------------------------------------------------------------------------
# Page and environment checks
# ---------------------------------------------------------------------------


def route_is_well_formed(route: str) -> bool:
    """``/`` or non-empty segments, none of them ``.`` or ``..``."""
    if route == "/":
        return True
    segments = route.split("/")[1:]
    return all(segment not in ("", ".", "..") and "\\" not in segment for segment in segments)


def check_pages(prd: PRD) -> list[str]:
    """Root route, route shape, uniqueness of routes and page files, component names."""
    errors: list[str] = []

    if not any(page.route == "/" for page in prd.pages):
        errors.append("A root page with route '/' is required")

    for page in prd.pages:
        if not route_is_well_formed(page.route):
            errors.append(
                f"Invalid page route '{page.route}': route segments must be non-empty "
                "and may not be '.' or '..'"
            )

    seen: set[str] = set()
    reported: set[str] = set()
    for page in prd.pages:
        if page.route in seen and page.route not in reported:
            errors.append(f"Duplicate page route: {page.route}")
            reported.add(page.route)
        seen.add(page.route)

    # Distinct routes can still map to one file, e.g. "/" and "/index" on Next.js.
    page_path = get_profile(prd.tech_stack.framework).page_path
    owners: dict[str, str] = {}
    clashes: set[tuple[str, str]] = set()
    for page in prd.pages:
        if not route_is_well_formed(page.route):
            continue
        path = page_path(page.route)
        owner = owners.setdefault(path, page.route)
        if owner != page.route and (owner, page.route) not in clashes:
            clashes.add((owner, page.route))
            errors.append(f"Page routes {owner} and {page.route} both generate {path}")

    for page in prd.pages:
        for component in page.components:
            if not COMPONENT_NAME_RE.match(component):
                errors.append(
                    f"Invalid component name '{component}' on page {page.route}: "
                    "component names must be PascalCase"
                )

    return errors


def check_environment(prd: PRD) -> list[str]:
    """Upper-snake-case naming for environment variables and secrets."""
    errors: list[str] = []
    for key in prd.environment.variables:
        if not ENV_NAME_RE.match(key):
            errors.append(
                f"Invalid environment variable name '{key}': "
                "use uppercase letters, digits and underscores"
            )
    for secret in prd.environment.secrets:
        if not ENV_NAME_RE.match(secret):
            errors.append(
                f"Invalid secret name '{secret}': "
                "use uppercase letters, digits and underscores"
            )
    return errors


ITEM_CHECKS: list[Callable[[PRD], list[str]]] = [check_pages, check_environment]
