"""Tests for models modules."""

import pytest
from pathlib import Path

from src.builder.models import Artifact, Diagnostic
from src.server.models import ReloadEvent, hello_message
from src.watcher.models import ChangeEvent, ChangeKind, RawFSEvent, Role


class TestRole:
    """Tests for Role enum."""

    def test_role_values(self):
        assert Role.COMPILE.value == "compile"
        assert Role.RELOAD.value == "reload"


class TestChangeEvent:
    """Tests for ChangeEvent dataclass."""

    def test_create_change_event(self, tmp_path):
        event = ChangeEvent(path=tmp_path / "src" / "Main.elm", role=Role.COMPILE)
        assert event.kind is ChangeKind.MODIFIED
        assert event.timestamp > 0

    def test_requires_absolute_path(self):
        with pytest.raises(ValueError, match="path must be absolute"):
            ChangeEvent(path=Path("src/Main.elm"), role=Role.COMPILE)

    def test_immutable(self, tmp_path):
        event = ChangeEvent(path=tmp_path / "a.elm", role=Role.COMPILE)
        with pytest.raises(AttributeError):
            event.role = Role.RELOAD

    def test_to_dict(self, tmp_path):
        event = ChangeEvent(
            path=tmp_path / "index.html",
            role=Role.RELOAD,
            kind=ChangeKind.CREATED,
            timestamp=12.5,
        )
        assert event.to_dict() == {
            "path": str(tmp_path / "index.html"),
            "role": "reload",
            "kind": "created",
            "timestamp": 12.5,
        }


class TestRawFSEvent:
    """Tests for RawFSEvent dataclass."""

    def test_effective_path_is_source(self):
        raw = RawFSEvent(event_type="modified", src_path=Path("/a/b.elm"))
        assert raw.effective_path == Path("/a/b.elm")

    def test_effective_path_of_move_is_destination(self):
        raw = RawFSEvent(event_type="moved", src_path=Path("/a/.b.swp"), dest_path=Path("/a/b.elm"))
        assert raw.effective_path == Path("/a/b.elm")


class TestDiagnostic:
    """Tests for Diagnostic dataclass."""

    def test_location_with_region(self):
        diagnostic = Diagnostic(title="TYPE MISMATCH", message="...", path="src/Main.elm", line=3, column=7)
        assert diagnostic.location == "src/Main.elm:3:7"

    def test_location_without_path(self):
        assert Diagnostic(title="NO elm.json FILE", message="...").location == ""

    def test_render_names_file(self):
        diagnostic = Diagnostic(title="NAMING ERROR", message="I cannot find `foo`.\n", path="src/Main.elm", line=1)
        rendered = diagnostic.render()
        assert rendered.startswith("-- NAMING ERROR --- src/Main.elm:1:1")
        assert "I cannot find `foo`." in rendered


class TestArtifact:
    """Tests for Artifact dataclass."""

    def test_defaults(self, tmp_path):
        artifact = Artifact(path=tmp_path / "app.js")
        assert artifact.sources == []
        assert artifact.duration == 0.0
        assert artifact.built_at > 0


class TestReloadEvent:
    """Tests for ReloadEvent and protocol messages."""

    def test_reload_message(self):
        event = ReloadEvent(path="build/app.js")
        assert event.to_message() == {"command": "reload", "path": "build/app.js", "liveCSS": True}

    def test_hello_message(self):
        message = hello_message()
        assert message["command"] == "hello"
        assert message["protocols"] == ["http://livereload.com/protocols/official-7"]
