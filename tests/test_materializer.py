"""Tests for template materialization (drafter.materializer).

Covers:
- Marker substitution and pass-through of unknown markers
- Order independence when values contain markers
- Manifest file exclusion and nested directories
- Name overrides
- Dry-run equivalence between LocalFSSink and DryRunRecorder
- Unresolved marker reporting
"""

from __future__ import annotations

from pathlib import Path

import pytest

from drafter.materializer import Materializer
from drafter.sinks import DryRunRecorder, LocalFSSink

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# render_text
# ---------------------------------------------------------------------------


class TestRenderText:
    def test_substitutes_marker(self):
        out = Materializer({"FOO": "bar"}).render_text("value: {{FOO}} and {{FOO}}")
        assert out == "value: bar and bar"
        assert "{{FOO}}" not in out

    def test_unknown_marker_untouched(self):
        out = Materializer({"FOO": "bar"}).render_text("{{FOO}} {{BAR}}")
        assert out == "bar {{BAR}}"

    def test_helm_expressions_untouched(self):
        text = "image: {{ .Values.image }}\nname: {{APP}}"
        assert Materializer({"APP": "web"}).render_text(text) == "image: {{ .Values.image }}\nname: web"

    def test_spaced_marker_not_substituted(self):
        assert Materializer({"FOO": "bar"}).render_text("{{ FOO }}") == "{{ FOO }}"

    def test_values_are_not_expanded_again(self):
        variables = {"A": "{{B}}", "B": "b"}
        assert Materializer(variables).render_text("{{A}}-{{B}}") == "{{B}}-b"
        reversed_vars = dict(reversed(list(variables.items())))
        assert Materializer(reversed_vars).render_text("{{A}}-{{B}}") == "{{B}}-b"

    def test_prefix_names(self):
        variables = {"PORT": "80", "PORTNAME": "http"}
        assert Materializer(variables).render_text("{{PORT}} {{PORTNAME}}") == "80 http"

    def test_regex_characters_in_names_and_values(self):
        out = Materializer({"A.B": r"\1$x"}).render_text("{{A.B}} {{AxB}}")
        assert out == r"\1$x {{AxB}}"

    def test_no_variables(self):
        assert Materializer({}).render_text("{{FOO}}") == "{{FOO}}"

    def test_unresolved_markers_collected(self):
        materializer = Materializer({"FOO": "bar"})
        materializer.render_text("{{FOO}} {{MISSING}} {{ .Values.x }}")
        assert materializer.unresolved_markers == {"MISSING"}


# ---------------------------------------------------------------------------
# materialize
# ---------------------------------------------------------------------------


class TestMaterialize:
    def test_writes_tree(self, template_tree: Path, tmp_path: Path):
        dest = tmp_path / "out"
        written = Materializer({"APPNAME": "web", "PORT": "8080"}).materialize(
            template_tree, dest, LocalFSSink()
        )
        assert (dest / "Dockerfile").read_text(encoding="utf-8") == "EXPOSE 8080\n"
        deployment = (dest / "manifests" / "deployment.yaml").read_text(encoding="utf-8")
        assert "name: web" in deployment
        assert "keep: {{UNKNOWN}}" in deployment
        assert "{{ .Values.image }}" in deployment
        assert dest / "Dockerfile" in written

    def test_manifest_not_copied(self, template_tree: Path, tmp_path: Path):
        dest = tmp_path / "out"
        Materializer({}).materialize(template_tree, dest, LocalFSSink())
        assert not (dest / "draft.yaml").exists()

    def test_name_override_applied(self, template_tree: Path, tmp_path: Path):
        dest = tmp_path / "out"
        Materializer({"APPNAME": "web"}, {"service.yaml": "app-"}).materialize(
            template_tree, dest, LocalFSSink()
        )
        assert (dest / "manifests" / "app-service.yaml").read_text(encoding="utf-8") == "service: web\n"
        assert not (dest / "manifests" / "service.yaml").exists()

    def test_written_in_sorted_order(self, template_tree: Path, tmp_path: Path):
        materializer = Materializer({})
        written = materializer.materialize(template_tree, tmp_path / "out", DryRunRecorder())
        assert [p.name for p in written] == ["Dockerfile", "deployment.yaml", "service.yaml"]
        assert materializer.written == written

    def test_directories_ensured_before_files(self, template_tree: Path, tmp_path: Path):
        recorder = DryRunRecorder()
        Materializer({}).materialize(template_tree, tmp_path / "out", recorder)
        assert recorder.directories == [str(tmp_path / "out" / "manifests")]

    def test_dry_run_equivalence(self, template_tree: Path, tmp_path: Path):
        variables = {"APPNAME": "web", "PORT": "8080"}
        dest = tmp_path / "out"
        recorder = DryRunRecorder()
        Materializer(variables).materialize(template_tree, dest, recorder)
        Materializer(variables).materialize(template_tree, dest, LocalFSSink())

        recorded = recorder.info.files_to_write
        assert len(recorded) == 3
        for entry in recorded:
            assert Path(entry.path).read_bytes() == entry.content.encode("utf-8")

    def test_end_to_end_port_scenario(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "server.conf").write_text("listen {{PORT}}", encoding="utf-8")
        Materializer({"PORT": "8080"}).materialize(src, tmp_path / "dest", LocalFSSink())
        assert (tmp_path / "dest" / "server.conf").read_text(encoding="utf-8") == "listen 8080"

    def test_crlf_line_endings_kept(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "run.bat").write_bytes(b"x {{A}}\r\ny\r\n")
        Materializer({"A": "1"}).materialize(src, tmp_path / "dest", LocalFSSink())
        assert (tmp_path / "dest" / "run.bat").read_bytes() == b"x 1\r\ny\r\n"

    def test_binary_file_copied_unchanged(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        data = b"\x89PNG\r\n\x1a\n\x00{{A}}\xff"
        (src / "logo.png").write_bytes(data)
        materializer = Materializer({"A": "1"})
        materializer.materialize(src, tmp_path / "dest", LocalFSSink())
        assert (tmp_path / "dest" / "logo.png").read_bytes() == data
        assert materializer.unresolved_markers == set()
