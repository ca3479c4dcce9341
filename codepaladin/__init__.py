"""CodePaladin: deterministic project generation from a validated PRD."""

__version__ = "1.0.0"
