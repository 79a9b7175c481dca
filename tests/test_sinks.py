"""Tests for output sinks (drafter.sinks).

Tests cover:
- LocalFSSink directory creation (idempotent, file collision) and writes
- DryRunRecorder file and variable recording
- DryRunInfo JSON shape and saving
- Protocol conformance
"""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from drafter.sinks import DryRunRecorder, LocalFSSink, TemplateSink

pytestmark = pytest.mark.unit


class TestLocalFSSink:
    def test_ensure_directory_twice(self, tmp_path: Path):
        sink = LocalFSSink()
        target = tmp_path / "a" / "b"
        sink.ensure_directory(target)
        sink.ensure_directory(target)
        assert target.is_dir()

    def test_ensure_directory_on_file_fails(self, tmp_path: Path):
        path = tmp_path / "file"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(NotADirectoryError):
            LocalFSSink().ensure_directory(path)

    def test_write_file_creates_parents(self, tmp_path: Path):
        target = tmp_path / "deep" / "nested" / "file.txt"
        LocalFSSink().write_file(target, b"hello")
        assert target.read_bytes() == b"hello"

    def test_write_file_overwrites(self, tmp_path: Path):
        target = tmp_path / "file.txt"
        sink = LocalFSSink()
        sink.write_file(target, b"one")
        sink.write_file(target, b"two")
        assert target.read_bytes() == b"two"


class TestDryRunRecorder:
    def test_nothing_touches_disk(self, tmp_path: Path, recorder: DryRunRecorder):
        recorder.ensure_directory(tmp_path / "dir")
        recorder.write_file(tmp_path / "dir" / "file", b"data")
        assert list(tmp_path.iterdir()) == []

    def test_ensure_directory_twice(self, recorder: DryRunRecorder):
        recorder.ensure_directory("a")
        recorder.ensure_directory("a")
        assert recorder.directories == ["a"]

    def test_records_files_in_order(self, recorder: DryRunRecorder):
        recorder.write_file("b.txt", b"B")
        recorder.write_file("a.txt", b"A")
        assert [f.path for f in recorder.info.files_to_write] == ["b.txt", "a.txt"]
        assert [f.content for f in recorder.info.files_to_write] == ["B", "A"]

    def test_record_variables(self, recorder: DryRunRecorder):
        recorder.record("PORT", "80")
        recorder.record_all({"APPNAME": "web", "PORT": "8080"})
        assert recorder.info.variables == {"PORT": "8080", "APPNAME": "web"}

    def test_json_shape(self, recorder: DryRunRecorder):
        recorder.record("LANGUAGE", "python")
        recorder.write_file("out/Dockerfile", b"FROM python")
        data = json.loads(recorder.to_json())
        assert data == {
            "variables": {"LANGUAGE": "python"},
            "filesToWrite": [{"path": "out/Dockerfile", "content": "FROM python"}],
        }

    def test_crlf_kept(self, recorder: DryRunRecorder):
        recorder.write_file("win.txt", b"a\r\nb\r\n")
        assert recorder.info.files_to_write[0].content == "a\r\nb\r\n"
        assert "\\r\\n" in recorder.to_json()

    def test_binary_recorded_as_base64(self, recorder: DryRunRecorder):
        data = b"\x89PNG\r\n\x1a\n\x00\xff"
        recorder.write_file("logo.png", data)
        (entry,) = json.loads(recorder.to_json())["filesToWrite"]
        assert entry["encoding"] == "base64"
        assert base64.b64decode(entry["content"]) == data

    def test_save(self, tmp_path: Path, recorder: DryRunRecorder):
        recorder.record("A", "1")
        path = recorder.save(tmp_path / "reports" / "dry-run.json")
        assert json.loads(path.read_text(encoding="utf-8"))["variables"] == {"A": "1"}


class TestProtocol:
    def test_both_sinks_satisfy_protocol(self):
        assert isinstance(LocalFSSink(), TemplateSink)
        assert isinstance(DryRunRecorder(), TemplateSink)
