"""drafter -- scaffold container, Kubernetes and CI files from templates.

Quick usage::

    from drafter import Materializer, PromptDispatcher, Resolver, TemplateManifest
    from drafter.sinks import LocalFSSink

    manifest = TemplateManifest.load("templates/dockerfiles/python/draft.yaml")
    variables = Resolver(PromptDispatcher()).resolve(manifest.variables)
    Materializer(variables, manifest.name_override_map()).materialize(
        "templates/dockerfiles/python", "./my-app", LocalFSSink()
    )
"""

from drafter.materializer import Materializer
from drafter.packs import TemplateCatalog
from drafter.prompts import PromptDispatcher
from drafter.resolver import Resolver, compute_default, parse_flag_variables
from drafter.sinks import DryRunRecorder, LocalFSSink
from drafter.variables import TemplateManifest, VariableDeclaration, VariableKind

__all__ = [
    "DryRunRecorder",
    "LocalFSSink",
    "Materializer",
    "PromptDispatcher",
    "Resolver",
    "TemplateCatalog",
    "TemplateManifest",
    "VariableDeclaration",
    "VariableKind",
    "compute_default",
    "parse_flag_variables",
]
