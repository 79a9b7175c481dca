"""Exception hierarchy for drafter.

Every failure the CLI reports is a ``DrafterError``; I/O failures from the
output sinks surface as the underlying ``OSError``.
"""

from __future__ import annotations


class DrafterError(Exception):
    """Base class for every error raised by drafter."""


class VariableFormatError(DrafterError):
    """A ``name=value`` override string is malformed."""


class ManifestError(DrafterError):
    """A template manifest (``draft.yaml``) is malformed or inconsistent."""


class ConfigError(DrafterError):
    """A create-config document cannot be read or validated."""


class VariableNotFoundError(DrafterError):
    """A variable name has no declaration in the manifest."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"variable {name} not found")


class ResolutionError(DrafterError):
    """A variable could not be given a value without prompting."""


class ValidationError(DrafterError):
    """A resolved value failed its validation rule."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class PromptError(DrafterError):
    """Input was required but no interactive terminal is available."""


class TemplateNotFoundError(DrafterError):
    """A template pack (language, deploy type, workflow) does not exist."""
