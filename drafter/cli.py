"""drafter command-line interface.

Usage::

    drafter create --language python --deploy-type manifests
    drafter create -c create-config.yaml --dry-run --dry-run-file dry-run.json
    drafter generate-workflow --deploy-type helm -r myregistry -b main
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .config import CreateConfig, DrafterSettings
from .errors import DrafterError, ResolutionError
from .packs import DEPLOYMENTS, DOCKERFILES, WORKFLOWS, TemplateCatalog
from .prompts import PromptDispatcher
from .resolver import Resolver, parse_flag_variables
from .sinks import DryRunRecorder, LocalFSSink, TemplateSink
from .utils import (
    console,
    print_error,
    print_step,
    print_success,
    print_summary_table,
    print_warning,
    setup_logging,
)
from .validators import Validator
from .variables import TemplateManifest, VariableDeclaration
from .workflows import add_workflow_arguments, collect_field_values

LANGUAGE_VARIABLE = "LANGUAGE"
DEPLOY_TYPES = ("helm", "kustomize", "manifests")
_DEPLOYMENT_DIRS = ("charts", "base", "overlays", "manifests")


class NoLanguageDetectedError(DrafterError):
    """Raised when ``create`` has no language to build a Dockerfile for."""

    def __init__(self) -> None:
        super().__init__(
            "no supported languages were detected; pass --language or set languageType "
            "in the create config"
        )


# ---------------------------------------------------------------------------
# Invocation context
# ---------------------------------------------------------------------------


@dataclass
class InvocationContext:
    """Everything one CLI invocation needs; nothing outlives it."""

    settings: DrafterSettings
    prompter: PromptDispatcher
    validator: Validator
    flag_variables: dict[str, str] = field(default_factory=dict)
    sink: TemplateSink = field(default_factory=LocalFSSink)
    recorder: DryRunRecorder | None = None

    @classmethod
    def build(
        cls,
        settings: DrafterSettings,
        flag_variables: Sequence[str] = (),
        prompter: PromptDispatcher | None = None,
        validator: Validator | None = None,
    ) -> "InvocationContext":
        recorder = DryRunRecorder() if settings.dry_run else None
        return cls(
            settings=settings,
            prompter=prompter or PromptDispatcher(interactive=settings.interactive),
            validator=validator or Validator(base_dir=settings.destination),
            flag_variables=parse_flag_variables(flag_variables),
            sink=recorder if recorder is not None else LocalFSSink(),
            recorder=recorder,
        )

    def catalog(self, name: str) -> TemplateCatalog:
        return TemplateCatalog.bundled(name, self.settings.templates_dir)

    def resolve(
        self,
        manifest: TemplateManifest,
        overrides: dict[str, str] | None = None,
        config_values: dict[str, str] | None = None,
    ) -> dict[str, str]:
        """Resolve *manifest*'s variables.

        When a config document supplies the values, missing variables fall back
        to their defaults and are never prompted for.
        """
        prompter = self.prompter if config_values is None else _require_from_config
        resolver = Resolver(prompter, self.validator)
        variables = resolver.resolve(
            manifest.variables,
            overrides=self.flag_variables if overrides is None else overrides,
            config_values=config_values,
        )
        if self.recorder is not None:
            self.recorder.record_all(variables)
        return variables

    def materialize(
        self, catalog: TemplateCatalog, name: str, variables: dict[str, str], dest: Path
    ) -> None:
        materializer = catalog.materialize(name, variables, dest, self.sink)
        if materializer.unresolved_markers:
            print_warning(
                "--> Unresolved template variables left in output: "
                + ", ".join(sorted(materializer.unresolved_markers))
            )

    def finish(self) -> None:
        """Emit the dry-run report, if any."""
        if self.recorder is None:
            return
        console.print(self.recorder.to_json(), markup=False, highlight=False, soft_wrap=True)
        if self.settings.dry_run_file:
            path = self.recorder.save(self.settings.dry_run_file)
            print_step(f"writing dry run info to file {path}")


def _require_from_config(declaration: VariableDeclaration, seed: str) -> str:
    if seed:
        return seed
    raise ResolutionError(
        f"config missing required variable: {declaration.name} "
        f"with description: {declaration.description}"
    )


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def search_directory(dest: Path) -> tuple[bool, bool]:
    """Return ``(has_dockerfile, has_deployment_files)`` for *dest*."""
    has_dockerfile = (dest / "Dockerfile").is_file()
    has_deployment = any((dest / name).is_dir() for name in _DEPLOYMENT_DIRS)
    return has_dockerfile, has_deployment


@dataclass
class PlannedPack:
    """A pack whose variables are resolved and which is ready to write."""

    catalog: TemplateCatalog
    name: str
    variables: dict[str, str]
    message: str


def plan_dockerfile(ctx: InvocationContext, create_config: CreateConfig, language: str) -> PlannedPack:
    print_step("--- Dockerfile Creation ---")
    if not language:
        raise NoLanguageDetectedError()
    catalog = ctx.catalog(DOCKERFILES)
    manifest = catalog.get_config(language)

    config_values = (
        create_config.language_values() if create_config.language_variables is not None else None
    )
    variables = ctx.resolve(manifest, config_values=config_values)
    return PlannedPack(catalog, language, variables, "--> Creating Dockerfile...")


def plan_deployment(ctx: InvocationContext, create_config: CreateConfig, deploy_type: str) -> PlannedPack:
    print_step("--- Deployment File Creation ---")
    catalog = ctx.catalog(DEPLOYMENTS)
    if create_config.deploy_type:
        deploy_type = create_config.deploy_type
    elif not deploy_type:
        deploy_type = ctx.prompter.select("Select k8s Deployment Type", catalog.names() or DEPLOY_TYPES)
    deploy_type = deploy_type.lower()
    manifest = catalog.get_config(deploy_type)

    config_values = (
        create_config.deploy_values() if create_config.deploy_variables is not None else None
    )
    variables = ctx.resolve(manifest, config_values=config_values)
    return PlannedPack(
        catalog, deploy_type, variables, f"--> Creating {deploy_type} Kubernetes resources..."
    )


def run_create(ctx: InvocationContext, args: argparse.Namespace) -> None:
    if args.dockerfile_only and args.deployment_only:
        raise DrafterError("can only pass in one of --dockerfile-only and --deployment-only")

    create_config = CreateConfig.load(args.create_config) if args.create_config else CreateConfig()
    language = (create_config.language_type or args.language or "").lower()
    dest = ctx.settings.destination

    make_dockerfile = not args.deployment_only
    make_deployment = not args.dockerfile_only

    if not args.skip_file_detection:
        has_dockerfile, has_deployment = search_directory(dest)
        if make_dockerfile and has_dockerfile:
            make_dockerfile = ctx.prompter.confirm(
                "We found Dockerfile in the directory, would you like to recreate the Dockerfile?"
            )
            if not make_dockerfile:
                print_step("--> Found Dockerfile in local directory, skipping Dockerfile creation...")
        if make_deployment and has_deployment:
            make_deployment = ctx.prompter.confirm(
                "We found deployment files in the directory, would you like to create new deployment files?"
            )
            if not make_deployment:
                print_step(
                    "--> Found deployment directory in local directory, skipping deployment file creation..."
                )

    # Every pack is resolved before the first file is written.
    plans: list[PlannedPack] = []
    if make_dockerfile:
        plans.append(plan_dockerfile(ctx, create_config, language))
    if make_deployment:
        plans.append(plan_deployment(ctx, create_config, args.deploy_type or ""))

    for plan in plans:
        print_step(plan.message)
        ctx.materialize(plan.catalog, plan.name, plan.variables, dest)

    if ctx.recorder is not None:
        ctx.recorder.record(LANGUAGE_VARIABLE, language)
        ctx.finish()
    else:
        print_success("drafter has successfully created deployment resources for your project")


# ---------------------------------------------------------------------------
# generate-workflow
# ---------------------------------------------------------------------------


def run_generate_workflow(ctx: InvocationContext, args: argparse.Namespace) -> None:
    overrides = {**collect_field_values(args), **ctx.flag_variables}
    catalog = ctx.catalog(WORKFLOWS)

    deploy_type = args.deploy_type or ctx.prompter.select(
        "Select k8s Deployment Type", catalog.names() or DEPLOY_TYPES
    )
    deploy_type = deploy_type.lower()
    manifest = catalog.get_config(deploy_type)

    variables = ctx.resolve(manifest, overrides=overrides)
    print_step("--> Generating Github workflow")
    ctx.materialize(catalog, deploy_type, variables, ctx.settings.destination)

    if ctx.recorder is not None:
        ctx.finish()
    else:
        print_summary_table(variables, title="Workflow variables")
        print_success("drafter has successfully generated a Github workflow for your project")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drafter",
        description="drafter -- scaffold Dockerfiles, Kubernetes manifests and CI workflows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  drafter create --language python --deploy-type manifests\n"
            "  drafter create -c create-config.yaml --dry-run\n"
            "  drafter generate-workflow --deploy-type helm -r myregistry -b main\n"
        ),
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug output")
    parser.add_argument("--dry-run", action="store_true", help="record writes instead of performing them")
    parser.add_argument("--dry-run-file", default=None, help="save the dry-run report to this file")
    parser.add_argument(
        "--non-interactive", action="store_true", help="fail instead of prompting for missing values"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create", help="add minimum required files to the directory")
    create.add_argument("-c", "--create-config", default=None, help="path to the create config file")
    create.add_argument("-l", "--language", default="", help="language used to create the Dockerfile")
    create.add_argument("-d", "--destination", default=None, help="path to the project directory")
    create.add_argument("--deploy-type", default="", help="deployment type (helm, kustomize, manifests)")
    create.add_argument("--dockerfile-only", action="store_true", help="only create the Dockerfile")
    create.add_argument("--deployment-only", action="store_true", help="only create deployment files")
    create.add_argument("--skip-file-detection", action="store_true", help="skip the existing-file check")
    create.add_argument("--templates-dir", default=None, help="alternative template root")
    create.add_argument(
        "--variable", action="append", default=[], metavar="NAME=VALUE",
        help="pass additional variables (repeatable)",
    )
    create.set_defaults(handler=run_create)

    workflow = sub.add_parser(
        "generate-workflow", help="generate a Github workflow to build and deploy to AKS"
    )
    add_workflow_arguments(workflow)
    workflow.add_argument("-d", "--destination", default=None, help="path to the project directory")
    workflow.add_argument("--deploy-type", default="", help="deployment type (helm, kustomize, manifests)")
    workflow.add_argument("--templates-dir", default=None, help="alternative template root")
    workflow.add_argument(
        "--variable", action="append", default=[], metavar="NAME=VALUE",
        help="pass additional variables (repeatable)",
    )
    workflow.set_defaults(handler=run_generate_workflow)

    return parser


def settings_from_args(args: argparse.Namespace) -> DrafterSettings:
    """Environment settings, overridden by whichever flags were given."""
    settings = DrafterSettings.from_env()
    updates: dict[str, object] = {}
    if args.destination:
        updates["destination"] = Path(args.destination)
    if args.templates_dir:
        updates["templates_dir"] = Path(args.templates_dir)
    if args.dry_run:
        updates["dry_run"] = True
    if args.dry_run_file:
        updates["dry_run_file"] = Path(args.dry_run_file)
    if args.verbose:
        updates["verbose"] = True
    if args.non_interactive:
        updates["interactive"] = False
    return settings.model_copy(update=updates)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``drafter`` / ``python -m drafter``."""
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    setup_logging(settings.verbose)

    try:
        ctx = InvocationContext.build(settings, args.variable)
        args.handler(ctx, args)
    except (DrafterError, OSError) as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
