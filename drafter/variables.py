"""Variable declarations and template manifests.

A template pack carries a ``draft.yaml`` manifest listing the variables its
files reference as ``{{NAME}}`` markers::

    templateName: deployment-manifests
    type: deployment
    nameOverrides:
      - path: deployment.yaml
        prefix: app-
    variables:
      - name: PORT
        description: the port exposed in the application
        type: string
        default:
          value: 80
          isPromptDisabled: true
      - name: SERVICEPORT
        description: the port the service uses to make the application accessible
        default:
          referenceVar: PORT

The models below validate that shape with Pydantic v2 and expose name lookups.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ManifestError, VariableNotFoundError
from .utils import load_yaml

MANIFEST_FILENAME = "draft.yaml"


class VariableKind(str, Enum):
    """Value domain of a variable; governs which prompt form is used."""

    STRING = "string"
    BOOL = "bool"


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class VariableDeclaration(BaseModel):
    """One configurable slot of a template pack (a description, not a value)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1)
    description: str = Field(default="")
    kind: VariableKind = Field(default=VariableKind.STRING, alias="type")
    validation_rule: str = Field(default="", alias="validateType")
    default_value: str = Field(default="")
    reference_variable: str = Field(default="")
    prompt_disabled: bool = Field(default=False)

    @model_validator(mode="before")
    @classmethod
    def _flatten_default_block(cls, data: Any) -> Any:
        # ``default: {value, referenceVar, isPromptDisabled}`` in YAML.
        if not isinstance(data, dict) or "default" not in data:
            return data
        data = dict(data)
        block = data.pop("default") or {}
        if not isinstance(block, dict):
            block = {"value": block}
        data.setdefault("default_value", block.get("value"))
        data.setdefault("reference_variable", block.get("referenceVar"))
        data.setdefault("prompt_disabled", block.get("isPromptDisabled", False))
        return data

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value: Any) -> Any:
        if isinstance(value, VariableKind):
            return value
        # int, float and friends are prompted as free text.
        return VariableKind.BOOL if str(value).lower() == "bool" else VariableKind.STRING

    @field_validator("default_value", "reference_variable", "validation_rule", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _stringify(value)

    @field_validator("prompt_disabled", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return bool(value)


class NameOverride(BaseModel):
    """Prefix prepended to a template filename in the destination tree."""

    path: str
    prefix: str = ""


class TemplateManifest(BaseModel):
    """Parsed ``draft.yaml`` of a template pack."""

    model_config = ConfigDict(populate_by_name=True)

    template_name: str = Field(default="", alias="templateName")
    template_type: str = Field(default="", alias="type")
    description: str = Field(default="")
    variables: list[VariableDeclaration] = Field(default_factory=list)
    name_overrides: list[NameOverride] = Field(default_factory=list, alias="nameOverrides")

    @model_validator(mode="after")
    def _check_references(self) -> "TemplateManifest":
        by_name: dict[str, VariableDeclaration] = {}
        for variable in self.variables:
            if variable.name in by_name:
                raise ValueError(f"duplicate variable {variable.name}")
            by_name[variable.name] = variable

        for variable in self.variables:
            ref = variable.reference_variable
            if not ref:
                continue
            if ref == variable.name:
                raise ValueError(f"variable {variable.name} references itself")
            target = by_name.get(ref)
            if target is None:
                raise ValueError(
                    f"variable {variable.name} references undeclared variable {ref}"
                )
            if target.reference_variable:
                raise ValueError(
                    f"variable {variable.name} references {ref}, which itself references "
                    f"{target.reference_variable}; point {variable.name} at "
                    f"{target.reference_variable} directly"
                )
        return self

    # -- Lookups -------------------------------------------------------------

    def get_variable(self, name: str) -> VariableDeclaration:
        """Return the declaration called *name*.

        Raises:
            VariableNotFoundError: If no declaration has that name.
        """
        for variable in self.variables:
            if variable.name == name:
                return variable
        raise VariableNotFoundError(name)

    def get_name_override(self, filename: str) -> str:
        """Return the prefix configured for *filename*, or ``""``."""
        for override in self.name_overrides:
            if override.path == filename:
                return override.prefix
        return ""

    def name_override_map(self) -> dict[str, str]:
        return {o.path: o.prefix for o in self.name_overrides if o.prefix}

    # -- Loading -------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<manifest>") -> "TemplateManifest":
        """Validate a raw mapping, converting Pydantic errors to ``ManifestError``."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ManifestError(f"{source}: {exc}") from exc

    @classmethod
    def load(cls, path: str | Path) -> "TemplateManifest":
        """Read and validate a ``draft.yaml`` file."""
        path = Path(path)
        try:
            data = load_yaml(path)
        except (OSError, yaml.YAMLError) as exc:
            raise ManifestError(f"{path}: {exc}") from exc
        except TypeError as exc:
            raise ManifestError(str(exc)) from exc
        return cls.from_dict(data, source=str(path))
