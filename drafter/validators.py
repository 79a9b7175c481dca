"""Single-field validation rules for resolved variable values.

A declaration's ``validateType`` selects one of the rules in
:class:`ValidationRule`.  Identifiers that are not known rules are accepted
without complaint; an empty identifier means "no validation".

The registry rule talks to the Azure CLI: it makes sure the operator is logged
in before checking that the registry exists.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Callable

from .errors import ValidationError
from .utils import run_command
from .variables import VariableDeclaration

logger = logging.getLogger(__name__)


class ValidationRule(str, Enum):
    AZ_CONTAINER_REGISTRY = "azContainerRegistry"
    AZ_CLUSTER_NAME = "azClusterName"
    AZ_RESOURCE_GROUP = "azResourceGroup"
    CONTAINER_NAME = "containerName"
    DIR = "dir"
    GH_BRANCH = "ghBranch"


# ---------------------------------------------------------------------------
# Azure CLI
# ---------------------------------------------------------------------------


class AzureCli:
    """Thin wrapper over the ``az`` executable."""

    def __init__(self, executable: str = "az") -> None:
        self.executable = executable

    def _run(self, *args: str) -> tuple[int, str, str]:
        return run_command([self.executable, *args])

    def ensure_installed(self) -> None:
        code, _, _ = self._run("version")
        if code != 0:
            raise ValidationError(
                "az", "Azure CLI is required; install it from https://aka.ms/azure-cli"
            )

    def is_logged_in(self) -> bool:
        code, _, _ = self._run("account", "show")
        return code == 0

    def log_in(self) -> None:
        code, _, stderr = self._run("login")
        if code != 0:
            raise ValidationError("az", f"failed to log in to Azure CLI: {stderr}")

    def ensure_logged_in(self) -> None:
        self.ensure_installed()
        if not self.is_logged_in():
            logger.debug("not logged in to Azure CLI, running az login")
            self.log_in()

    def registry_exists(self, name: str) -> tuple[bool, str]:
        code, _, stderr = self._run("acr", "show", "--name", name)
        return code == 0, stderr


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

_REGISTRY_RE = re.compile(r"^[a-z0-9]{5,50}$")
_CLUSTER_RE = re.compile(r"^[A-Za-z0-9][-_A-Za-z0-9]{0,62}$")
_RESOURCE_GROUP_RE = re.compile(r"^[-\w.()]{1,90}$")
_CONTAINER_RE = re.compile(r"^[a-z0-9]([-a-z0-9._]*[a-z0-9])?$")


def validate_container_registry(name: str, value: str, az: AzureCli) -> None:
    az.ensure_logged_in()
    if not _REGISTRY_RE.match(value):
        raise ValidationError(
            name,
            f"registry name '{value}' does not meet Azure Container Registry naming requirements",
        )
    found, stderr = az.registry_exists(value)
    if not found:
        raise ValidationError(name, f"failed to find Azure Container Registry {value}: {stderr}")


def validate_cluster_name(name: str, value: str) -> None:
    if not _CLUSTER_RE.match(value):
        raise ValidationError(
            name,
            f"cluster name '{value}' must be 1-63 letters, digits, '-' or '_' "
            "and start with a letter or digit",
        )


def validate_resource_group(name: str, value: str) -> None:
    if not _RESOURCE_GROUP_RE.match(value) or value.endswith("."):
        raise ValidationError(
            name,
            f"resource group '{value}' must be 1-90 characters of letters, digits, "
            "'-', '_', '.', '(' or ')' and must not end with '.'",
        )


def validate_container_name(name: str, value: str) -> None:
    if len(value) > 128 or not _CONTAINER_RE.match(value):
        raise ValidationError(
            name,
            f"container name '{value}' must be lowercase alphanumerics separated by '-', '.' or '_'",
        )


def validate_dir(name: str, value: str, base_dir: Path | None = None) -> None:
    """Relative paths are taken from *base_dir* (the project directory) when given."""
    path = Path(value)
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    if not path.is_dir():
        raise ValidationError(name, f"directory '{value}' does not exist")


def validate_branch(name: str, value: str) -> None:
    invalid = (
        not value
        or value.startswith(("-", "/"))
        or value.endswith((".", "/", ".lock"))
        or ".." in value
        or "//" in value
        or "@{" in value
        or any(ch.isspace() or ch in "~^:?*[\\" for ch in value)
    )
    if invalid:
        raise ValidationError(name, f"'{value}' is not a valid git branch name")


class Validator:
    """Dispatches ``(name, declaration, value)`` to the declaration's rule."""

    def __init__(self, az: AzureCli | None = None, base_dir: str | Path | None = None) -> None:
        self.az = az or AzureCli()
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self._rules: dict[ValidationRule, Callable[[str, str], None]] = {
            ValidationRule.AZ_CONTAINER_REGISTRY: lambda n, v: validate_container_registry(
                n, v, self.az
            ),
            ValidationRule.AZ_CLUSTER_NAME: validate_cluster_name,
            ValidationRule.AZ_RESOURCE_GROUP: validate_resource_group,
            ValidationRule.CONTAINER_NAME: validate_container_name,
            ValidationRule.DIR: lambda n, v: validate_dir(n, v, self.base_dir),
            ValidationRule.GH_BRANCH: validate_branch,
        }

    def __call__(self, name: str, declaration: VariableDeclaration, value: str) -> None:
        self.validate(name, declaration, value)

    def validate(self, name: str, declaration: VariableDeclaration, value: str) -> None:
        """Run the declaration's rule against *value*.

        Raises:
            ValidationError: If the value is rejected.
        """
        if not declaration.validation_rule:
            return
        try:
            rule = ValidationRule(declaration.validation_rule)
        except ValueError:
            logger.debug(
                "no validation rule found for %s with validateType of %s",
                name,
                declaration.validation_rule,
            )
            return
        self._rules[rule](name, value)
