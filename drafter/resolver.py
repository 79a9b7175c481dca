"""Variable resolution.

Turns a list of declarations plus the externally supplied values into the
final ``name -> value`` mapping consumed by the materializer.  For each
declaration, in declaration order, the first definitive source wins:

1. names in ``skip`` are omitted entirely (the caller supplies them);
2. a value from the config document, used verbatim and not validated;
3. a command-line override;
4. for ``prompt_disabled`` declarations, the computed default, or an error;
5. an interactive answer, seeded with the computed default.

A second pass then fills every declaration that is still empty with its
computed default, so a declaration that references a variable declared after
it still picks up that variable's final value.

The computed default is the declaration's literal default, replaced by the
referenced variable's resolved value when that value is non-empty.  Exactly
one hop is followed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Callable, Protocol

from .errors import ResolutionError, VariableFormatError
from .variables import VariableDeclaration

logger = logging.getLogger(__name__)

ValidateFn = Callable[[str, VariableDeclaration, str], None]


class Prompter(Protocol):
    def __call__(self, declaration: VariableDeclaration, seed: str) -> str: ...


def parse_flag_variables(flag_variables: Iterable[str]) -> dict[str, str]:
    """Parse repeated ``--variable name=value`` flags.

    Only the first ``=`` separates name from value.

    Raises:
        VariableFormatError: If an entry contains no ``=``.
    """
    values: dict[str, str] = {}
    for flag_var in flag_variables:
        name, sep, value = flag_var.partition("=")
        if not sep:
            raise VariableFormatError(f"invalid variable format: {flag_var}")
        logger.debug("flag variable %s=%s", name, value)
        values[name] = value
    return values


def compute_default(declaration: VariableDeclaration, resolved: Mapping[str, str]) -> str:
    """Return the declaration's default, preferring a non-empty referenced value."""
    default = declaration.default_value
    ref = declaration.reference_variable
    if ref and resolved.get(ref):
        logger.debug(
            "setting default value for %s from referenceVar %s", declaration.name, ref
        )
        default = resolved[ref]
    return default


def _no_validation(name: str, declaration: VariableDeclaration, value: str) -> None:
    return None


class Resolver:
    """Resolves declarations to values.

    Args:
        prompter: Called as ``prompter(declaration, seed)`` for variables that
            need an answer from the user.
        validate: Called as ``validate(name, declaration, value)``; raises on
            rejection.  Defaults to accepting everything.
    """

    def __init__(self, prompter: Prompter, validate: ValidateFn | None = None) -> None:
        self.prompter = prompter
        self.validate = validate or _no_validation

    def resolve(
        self,
        declarations: Iterable[VariableDeclaration],
        overrides: Mapping[str, str] | None = None,
        config_values: Mapping[str, str] | None = None,
        skip: Iterable[str] | None = None,
    ) -> dict[str, str]:
        """Resolve every declaration.

        Resolution is all-or-nothing: any error aborts the whole pass.

        Raises:
            ResolutionError: A prompt-disabled variable has no default.
            ValidationError: A value failed its validation rule.
            PromptError: Input was needed but cannot be read.
        """
        declarations = list(declarations)
        overrides = dict(overrides or {})
        config_values = dict(config_values or {})
        skip_set = set(skip or ())

        resolved: dict[str, str] = {}
        from_config: set[str] = set()

        for decl in declarations:
            name = decl.name
            if name in skip_set:
                logger.debug("skipping prompt for %s", name)
                continue

            if config_values.get(name) is not None:
                logger.debug("using config document value for %s", name)
                resolved[name] = str(config_values[name])
                from_config.add(name)
                continue

            if name in overrides:
                logger.debug("using command-line value for %s", name)
                value = overrides[name]
            elif decl.prompt_disabled:
                logger.debug("skipping prompt for %s as it has isPromptDisabled=true", name)
                value = compute_default(decl, resolved)
                if not value:
                    raise ResolutionError(
                        f"isPromptDisabled is true for {name} but no default value was found"
                    )
            else:
                seed = compute_default(decl, resolved)
                value = self.prompter(decl, seed) or seed

            resolved[name] = value
            if value:
                self.validate(name, decl, value)

        # Fill values that were still empty once every variable had its turn.
        for decl in declarations:
            name = decl.name
            if name in skip_set or resolved.get(name):
                continue
            value = compute_default(decl, resolved)
            resolved[name] = value
            if value and name not in from_config:
                logger.debug("applied default %s=%s on second pass", name, value)
                self.validate(name, decl, value)

        declared = {decl.name for decl in declarations}
        for name, value in overrides.items():
            if name not in declared and name not in skip_set:
                resolved[name] = value

        return resolved
