"""drafter configuration.

Two typed documents, both Pydantic v2 models:

* ``DrafterSettings`` -- runtime settings for one CLI invocation, built from
  ``DRAFTER_*`` environment variables and then overridden by flags.
* ``CreateConfig`` -- the YAML document passed to ``create --create-config``
  that pins the language, the deployment type and their variables so that
  ``create`` can run without questions.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .utils import load_yaml

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


class DrafterSettings(BaseModel):
    """Runtime settings shared by every subcommand."""

    destination: Path = Field(default=Path("."))
    templates_dir: Path | None = Field(
        default=None, description="Alternative root holding dockerfiles/, deployments/, workflows/"
    )
    dry_run: bool = Field(default=False, description="Record writes instead of performing them")
    dry_run_file: Path | None = Field(default=None, description="Where to save the dry-run report")
    verbose: bool = Field(default=False)
    interactive: bool = Field(default=True, description="Allow prompting for missing values")

    @classmethod
    def from_env(cls) -> "DrafterSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            DRAFTER_DESTINATION, DRAFTER_TEMPLATES_DIR, DRAFTER_DRY_RUN,
            DRAFTER_DRY_RUN_FILE, DRAFTER_VERBOSE, DRAFTER_NON_INTERACTIVE.
        """
        templates_dir = os.environ.get("DRAFTER_TEMPLATES_DIR")
        dry_run_file = os.environ.get("DRAFTER_DRY_RUN_FILE")
        return cls(
            destination=Path(os.environ.get("DRAFTER_DESTINATION", ".")),
            templates_dir=Path(templates_dir) if templates_dir else None,
            dry_run=_env_flag("DRAFTER_DRY_RUN"),
            dry_run_file=Path(dry_run_file) if dry_run_file else None,
            verbose=_env_flag("DRAFTER_VERBOSE"),
            interactive=not _env_flag("DRAFTER_NON_INTERACTIVE"),
        )


class UserInput(BaseModel):
    """A single ``{name, value}`` pair in a create-config document."""

    name: str
    value: str = ""


class CreateConfig(BaseModel):
    """Answers for ``create`` supplied up front."""

    model_config = ConfigDict(populate_by_name=True)

    language_type: str = Field(default="", alias="languageType")
    deploy_type: str = Field(default="", alias="deployType")
    language_variables: list[UserInput] | None = Field(default=None, alias="languageVariables")
    deploy_variables: list[UserInput] | None = Field(default=None, alias="deployVariables")

    def language_values(self) -> dict[str, str]:
        return {v.name: v.value for v in self.language_variables or []}

    def deploy_values(self) -> dict[str, str]:
        return {v.name: v.value for v in self.deploy_variables or []}

    @classmethod
    def load(cls, path: str | Path) -> "CreateConfig":
        """Parse and validate a create-config YAML file.

        Raises:
            ConfigError: If the file is unreadable, not YAML, or has the wrong shape.
        """
        path = Path(path)
        try:
            data = load_yaml(path)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"could not read create config {path}: {exc}") from exc
        except TypeError as exc:
            raise ConfigError(f"create config {path} must be a mapping") from exc
        for key in ("languageVariables", "deployVariables"):
            entries = data.get(key)
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if isinstance(entry, dict) and entry.get("value") is not None:
                    entry["value"] = _yaml_scalar_to_str(entry["value"])
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"invalid create config {path}: {exc}") from exc


def _yaml_scalar_to_str(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
