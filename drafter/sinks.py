"""Output sinks for materialized templates.

``LocalFSSink`` writes straight to disk.  ``DryRunRecorder`` keeps an ordered
record of the files that would have been written and of the variables that
produced them, and serialises that record as JSON::

    {
      "variables": {"PORT": "8080"},
      "filesToWrite": [{"path": "out/Dockerfile", "content": "..."}]
    }

File contents are recorded exactly as written.  Files that are not UTF-8 text
are recorded base64-encoded with ``"encoding": "base64"``.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .utils import ensure_dir, save_text

logger = logging.getLogger(__name__)


@runtime_checkable
class TemplateSink(Protocol):
    """Destination for materialized output."""

    def ensure_directory(self, path: str | Path) -> None: ...

    def write_file(self, path: str | Path, content: bytes) -> None: ...


class LocalFSSink:
    """Writes files to the local file system immediately."""

    def ensure_directory(self, path: str | Path) -> None:
        ensure_dir(path)

    def write_file(self, path: str | Path, content: bytes) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)


class FileToWrite(BaseModel):
    path: str
    content: str
    encoding: str | None = None

    @classmethod
    def from_bytes(cls, path: str | Path, data: bytes) -> "FileToWrite":
        try:
            return cls(path=str(path), content=data.decode("utf-8"))
        except UnicodeDecodeError:
            encoded = base64.b64encode(data).decode("ascii")
            return cls(path=str(path), content=encoded, encoding="base64")


class DryRunInfo(BaseModel):
    """Serialisable dry-run report."""

    model_config = ConfigDict(populate_by_name=True)

    variables: dict[str, str] = Field(default_factory=dict)
    files_to_write: list[FileToWrite] = Field(default_factory=list, alias="filesToWrite")


class DryRunRecorder:
    """Records writes and variables instead of touching the file system."""

    def __init__(self) -> None:
        self.info = DryRunInfo()
        self.directories: list[str] = []

    def ensure_directory(self, path: str | Path) -> None:
        path = str(path)
        if path not in self.directories:
            self.directories.append(path)

    def write_file(self, path: str | Path, content: bytes) -> None:
        logger.debug("dry run: would write %s", path)
        self.info.files_to_write.append(FileToWrite.from_bytes(path, content))

    def record(self, name: str, value: str) -> None:
        """Capture one resolved variable alongside the recorded files."""
        self.info.variables[name] = value

    def record_all(self, variables: dict[str, str]) -> None:
        for name, value in variables.items():
            self.record(name, value)

    def to_json(self) -> str:
        return self.info.model_dump_json(indent=2, by_alias=True, exclude_none=True)

    def save(self, path: str | Path) -> Path:
        """Write the JSON report to *path*."""
        return save_text(self.to_json(), path)
