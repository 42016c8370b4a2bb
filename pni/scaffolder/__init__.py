"""pni scaffolder -- writes and patches project files.

Each generator takes a ``TemplateRenderer`` and works on an existing project
directory.  Existing config files are patched section by section so user
settings survive, and missing ones are rendered from the bundled templates.

Quick usage::

    from pni.scaffolder import ConfigGenerator, TemplateRenderer

    renderer = TemplateRenderer()  # bundled templates only
    outcomes = await ConfigGenerator(renderer).generate(project_root, features)
"""

from pni.scaffolder.config_gen import ConfigGenerator
from pni.scaffolder.graphics import GraphicsInstaller, GraphicsResult
from pni.scaffolder.merge import ConfigDocument, MergeAction, MergeOutcome
from pni.scaffolder.structure_gen import StructureGenerator
from pni.scaffolder.templates import TemplateRenderer
from pni.scaffolder.tokens_gen import DesignTokenGenerator

__all__ = [
    "ConfigDocument",
    "ConfigGenerator",
    "DesignTokenGenerator",
    "GraphicsInstaller",
    "GraphicsResult",
    "MergeAction",
    "MergeOutcome",
    "StructureGenerator",
    "TemplateRenderer",
]
