"""Template pack discovery.

A catalog is a directory whose subdirectories are template packs; each pack
holds a ``draft.yaml`` manifest plus the files to materialize::

    templates/
        dockerfiles/python/{draft.yaml, Dockerfile, .dockerignore}
        deployments/helm/{draft.yaml, charts/...}
        workflows/manifests/{draft.yaml, .github/workflows/...}

The bundled catalogs live next to this module; ``--templates-dir`` points at
a directory with the same three-catalog layout.
"""

from __future__ import annotations

from pathlib import Path

from .errors import TemplateNotFoundError
from .materializer import Materializer
from .sinks import TemplateSink
from .variables import MANIFEST_FILENAME, TemplateManifest

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

DOCKERFILES = "dockerfiles"
DEPLOYMENTS = "deployments"
WORKFLOWS = "workflows"


class TemplateCatalog:
    """Template packs found under one catalog directory."""

    def __init__(self, root: str | Path, kind: str = "template") -> None:
        self.root = Path(root)
        self.kind = kind
        self._manifests: dict[str, TemplateManifest] = {}

    @classmethod
    def bundled(cls, catalog: str, templates_dir: str | Path | None = None) -> "TemplateCatalog":
        """Return one of the ``dockerfiles``/``deployments``/``workflows`` catalogs."""
        base = Path(templates_dir) if templates_dir else _DEFAULT_TEMPLATE_DIR
        return cls(base / catalog, kind=catalog.rstrip("s"))

    def names(self) -> list[str]:
        """Sorted names of every pack in the catalog."""
        if not self.root.is_dir():
            return []
        return sorted(
            p.name for p in self.root.iterdir() if (p / MANIFEST_FILENAME).is_file()
        )

    def pack_dir(self, name: str) -> Path:
        path = self.root / name.lower()
        if not (path / MANIFEST_FILENAME).is_file():
            available = ", ".join(self.names()) or "none"
            raise TemplateNotFoundError(
                f"unsupported {self.kind} type '{name}' (available: {available})"
            )
        return path

    def get_config(self, name: str) -> TemplateManifest:
        """Load (and cache) the manifest of pack *name*.

        Raises:
            TemplateNotFoundError: If the catalog has no such pack.
            ManifestError: If its ``draft.yaml`` is invalid.
        """
        key = name.lower()
        if key not in self._manifests:
            self._manifests[key] = TemplateManifest.load(self.pack_dir(key) / MANIFEST_FILENAME)
        return self._manifests[key]

    def materialize(
        self,
        name: str,
        variables: dict[str, str],
        dest: str | Path,
        sink: TemplateSink,
    ) -> Materializer:
        """Materialize pack *name* into *dest*.

        Returns the materializer so callers can inspect written paths and
        leftover markers.
        """
        manifest = self.get_config(name)
        materializer = Materializer(variables, manifest.name_override_map())
        materializer.materialize(self.pack_dir(name), dest, sink)
        return materializer
