"""Interactive questions for variables the resolver cannot settle on its own.

The dispatcher is a pure request/response boundary over ``rich.prompt``: it
keeps no state between calls.  Bool variables choose between ``true`` and
``false``; string variables accept free text, with blank input meaning "use
the default" when one exists and being rejected otherwise.
"""

from __future__ import annotations

import logging
from typing import Sequence, TextIO

from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from .errors import PromptError
from .utils import console as default_console
from .variables import VariableDeclaration, VariableKind

logger = logging.getLogger(__name__)

BOOL_CHOICES = ("true", "false")


class PromptDispatcher:
    """Asks the user for variable values.

    Args:
        console: Console used for rendering questions.
        interactive: When ``False`` (``--non-interactive``) questions with a
            default return it and all others raise ``PromptError``.
        stream: Optional input stream; defaults to the console's stdin.
        max_attempts: How many invalid answers are tolerated before giving up.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        interactive: bool = True,
        stream: TextIO | None = None,
        max_attempts: int = 5,
    ) -> None:
        self.console = console or default_console
        self.interactive = interactive
        self.stream = stream
        self.max_attempts = max_attempts

    def __call__(self, declaration: VariableDeclaration, seed: str) -> str:
        return self.ask(declaration, seed)

    # -- Variable prompts --------------------------------------------------

    def ask(self, declaration: VariableDeclaration, seed: str = "") -> str:
        """Ask for *declaration*'s value, pre-filling *seed* where possible."""
        logger.debug("constructing prompt for: %s", declaration.name)
        if declaration.kind is VariableKind.BOOL:
            return self.ask_bool(declaration, seed)
        return self.ask_string(declaration, seed)

    def ask_bool(self, declaration: VariableDeclaration, seed: str = "") -> str:
        default = seed.lower() if seed.lower() in BOOL_CHOICES else None
        return self.select(
            f"Please select {declaration.description or declaration.name}",
            BOOL_CHOICES,
            default=default,
            name=declaration.name,
        )

    def ask_string(self, declaration: VariableDeclaration, seed: str = "") -> str:
        label = f"Please enter {declaration.description or declaration.name}"
        if seed:
            label += f" (default: {seed})"

        if seed and not self.interactive:
            return seed

        for _ in range(self.max_attempts):
            answer = self._read(label, declaration.name)
            if answer:
                return answer
            if seed:
                return seed
            self.console.print("[prompt.invalid]input must not be empty")
        raise PromptError(f"no value provided for {declaration.name}")

    # -- Generic selection -------------------------------------------------

    def select(
        self,
        label: str,
        choices: Sequence[str],
        default: str | None = None,
        *,
        name: str = "",
    ) -> str:
        """Ask the user to pick one of *choices*; blank input picks *default*."""
        if not choices:
            raise PromptError("no selection options")
        shown = "/".join(choices)
        full_label = f"{label} [{shown}]"
        if default:
            full_label += f" (default: {default})"

        if default and not self.interactive:
            return default

        for _ in range(self.max_attempts):
            answer = self._read(full_label, name or label)
            if not answer and default:
                return default
            if answer in choices:
                return answer
            self.console.print(f"[prompt.invalid]please select one of: {shown}")
        raise PromptError(f"no valid selection made for {name or label}")

    def confirm(self, label: str, default: bool = False) -> bool:
        """Yes/no question."""
        return self.select(label, ("yes", "no"), default="yes" if default else "no") == "yes"

    # -- Internal ------------------------------------------------------------

    def _read(self, label: str, name: str) -> str:
        if not self.interactive:
            raise PromptError(f"input required for {name} but prompting is disabled")
        try:
            answer = Prompt.ask(
                Text(label),
                console=self.console,
                show_default=False,
                stream=self.stream,
            )
        except EOFError as exc:
            raise PromptError(f"input required for {name} but stdin is closed") from exc
        return (answer or "").strip()
