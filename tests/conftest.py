"""Shared pytest fixtures for the drafter test suite.

Provides reusable fixtures for:
- Scripted prompters that record which variables were asked for
- Declaration lists and small template trees on disk
- Validators with a mocked Azure CLI
- Dry-run recorders
"""

from __future__ import annotations

import textwrap
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from drafter.sinks import DryRunRecorder
from drafter.validators import AzureCli, Validator
from drafter.variables import VariableDeclaration, VariableKind


# ---------------------------------------------------------------------------
# Prompting
# ---------------------------------------------------------------------------


class ScriptedPrompter:
    """Answers prompts from a dict and records every call.

    Variables without a scripted answer get a blank answer, which the resolver
    treats as "use the seed".
    """

    def __init__(self, answers: dict[str, str] | None = None) -> None:
        self.answers = dict(answers or {})
        self.calls: list[tuple[str, str]] = []

    def __call__(self, declaration: VariableDeclaration, seed: str) -> str:
        self.calls.append((declaration.name, seed))
        return self.answers.get(declaration.name, "")

    @property
    def asked(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def prompter() -> ScriptedPrompter:
    """A prompter with no scripted answers."""
    return ScriptedPrompter()


@pytest.fixture
def make_prompter():
    """Factory for prompters with scripted answers."""
    return ScriptedPrompter


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


@pytest.fixture
def deployment_declarations() -> list[VariableDeclaration]:
    """Declarations resembling a deployment pack."""
    return [
        VariableDeclaration(name="APPNAME", description="the name of the application"),
        VariableDeclaration(name="PORT", description="the port", default_value="80"),
        VariableDeclaration(
            name="SERVICEPORT", description="the service port", reference_variable="PORT"
        ),
        VariableDeclaration(
            name="IMAGETAG", description="the image tag", default_value="latest", prompt_disabled=True
        ),
        VariableDeclaration(name="PRIVATE", description="private cluster", kind=VariableKind.BOOL),
    ]


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------


@pytest.fixture
def template_tree(tmp_path: Path) -> Path:
    """A small template pack with a manifest, a nested directory and markers."""
    root = tmp_path / "pack"
    (root / "manifests").mkdir(parents=True)
    (root / "draft.yaml").write_text(
        textwrap.dedent(
            """\
            templateName: sample
            type: deployment
            nameOverrides:
              - path: service.yaml
                prefix: app-
            variables:
              - name: APPNAME
                description: the name of the application
                default:
                  value: web
                  isPromptDisabled: true
              - name: PORT
                description: the port
                default:
                  value: 8080
                  isPromptDisabled: true
            """
        ),
        encoding="utf-8",
    )
    (root / "Dockerfile").write_text("EXPOSE {{PORT}}\n", encoding="utf-8")
    (root / "manifests" / "deployment.yaml").write_text(
        "name: {{APPNAME}}\nport: {{PORT}}\nimage: {{ .Values.image }}\nkeep: {{UNKNOWN}}\n",
        encoding="utf-8",
    )
    (root / "manifests" / "service.yaml").write_text(
        "service: {{APPNAME}}\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def catalog_root(tmp_path: Path, template_tree: Path) -> Path:
    """A templates directory with one pack in each catalog."""
    root = tmp_path / "templates"
    for catalog, pack in (("dockerfiles", "python"), ("deployments", "manifests"), ("workflows", "manifests")):
        target = root / catalog / pack
        target.mkdir(parents=True)
        for src in template_tree.rglob("*"):
            dest = target / src.relative_to(template_tree)
            if src.is_dir():
                dest.mkdir(parents=True, exist_ok=True)
            else:
                dest.write_bytes(src.read_bytes())
    return root


# ---------------------------------------------------------------------------
# Sinks & validation
# ---------------------------------------------------------------------------


@pytest.fixture
def recorder() -> DryRunRecorder:
    return DryRunRecorder()


@pytest.fixture
def mock_az() -> MagicMock:
    """An AzureCli whose commands all succeed."""
    az = MagicMock(spec=AzureCli)
    az.registry_exists.return_value = (True, "")
    return az


@pytest.fixture
def validator(mock_az: MagicMock) -> Validator:
    return Validator(az=mock_az)
