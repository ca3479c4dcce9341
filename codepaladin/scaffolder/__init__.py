"""CodePaladin scaffolder -- materializes a project directory from a PRD.

The generator takes a validated ``PRD``, projects it onto a flat
``ProjectConfiguration`` and runs a fixed sequence of stages, each writing
files rendered from the template store.

Quick usage::

    from codepaladin.scaffolder import ProjectGenerator
    from codepaladin.validator import validate_prd

    prd = validate_prd(raw)
    generator = ProjectGenerator(prd, "/tmp/output/my-app")
    result = await generator.generate()
"""

from codepaladin.scaffolder.content_filler import PageContentFiller
from codepaladin.scaffolder.generator import GenerationResult, ProjectGenerator
from codepaladin.scaffolder.projection import ProjectConfiguration, project_configuration
from codepaladin.scaffolder.templates import (
    FileSystemTemplateStore,
    InMemoryTemplateStore,
    TemplateRenderer,
)

__all__ = [
    "FileSystemTemplateStore",
    "GenerationResult",
    "InMemoryTemplateStore",
    "PageContentFiller",
    "ProjectConfiguration",
    "ProjectGenerator",
    "TemplateRenderer",
    "project_configuration",
]
