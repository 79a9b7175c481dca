"""Template materialization.

Copies a template tree into a destination through a sink, replacing every
``{{NAME}}`` marker whose NAME has a resolved value.  Markers without a value
are left verbatim so partial configurations still produce inspectable output;
so are other brace expressions such as Helm's ``{{ .Values.image }}``.

All markers are replaced in a single regex pass over the original text, so a
value that itself contains ``{{OTHER}}`` is never expanded again and the
result does not depend on the order of the variables.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path

from .sinks import TemplateSink
from .variables import MANIFEST_FILENAME

logger = logging.getLogger(__name__)

_LEFTOVER_RE = re.compile(r"\{\{([A-Z][A-Z0-9_]*)\}\}")


class Materializer:
    """Applies a resolved variable set to template files.

    Args:
        variables: Resolved ``name -> value`` mapping.
        name_overrides: ``filename -> prefix`` rules applied to leaf files.
    """

    def __init__(
        self,
        variables: Mapping[str, str],
        name_overrides: Mapping[str, str] | None = None,
    ) -> None:
        self.variables = dict(variables)
        self.name_overrides = dict(name_overrides or {})
        self.unresolved_markers: set[str] = set()
        self.written: list[Path] = []
        self._pattern: re.Pattern[str] | None = None
        if self.variables:
            names = sorted(self.variables, key=len, reverse=True)
            self._pattern = re.compile(
                r"\{\{(" + "|".join(re.escape(n) for n in names) + r")\}\}"
            )

    # -- Text --------------------------------------------------------------

    def render_text(self, text: str) -> str:
        """Substitute every known marker in *text*."""
        if self._pattern is not None:
            text = self._pattern.sub(lambda m: self.variables[m.group(1)], text)
        self.unresolved_markers.update(_LEFTOVER_RE.findall(text))
        return text

    def render_bytes(self, data: bytes, source: str | Path = "<bytes>") -> bytes:
        """Substitute markers in UTF-8 *data*; anything else is copied unchanged.

        Line endings are kept as they are in the template.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("%s is not UTF-8 text, copying it unchanged", source)
            return data
        return self.render_text(text).encode("utf-8")

    def destination_name(self, filename: str) -> str:
        prefix = self.name_overrides.get(filename, "")
        if prefix:
            logger.debug("overriding file %s with prefix %s", filename, prefix)
        return f"{prefix}{filename}"

    # -- Trees ---------------------------------------------------------------

    def materialize(
        self,
        src: str | Path,
        dest: str | Path,
        sink: TemplateSink,
    ) -> list[Path]:
        """Copy the template tree at *src* into *dest* through *sink*.

        The reserved ``draft.yaml`` manifest is never copied.  Directories are
        created before their contents are written.  Writes are not
        transactional: an error part-way leaves what was already written.

        Returns:
            Destination paths of every written file, in write order.
        """
        src_dir = Path(src)
        dest_dir = Path(dest)
        written: list[Path] = []

        for entry in sorted(src_dir.iterdir(), key=lambda p: p.name):
            if entry.name == MANIFEST_FILENAME:
                continue

            if entry.is_dir():
                target_dir = dest_dir / entry.name
                sink.ensure_directory(target_dir)
                written.extend(self.materialize(entry, target_dir, sink))
                continue

            target = dest_dir / self.destination_name(entry.name)
            logger.debug("writing %s", target)
            sink.write_file(target, self.render_bytes(entry.read_bytes(), entry))
            written.append(target)
            self.written.append(target)

        return written
