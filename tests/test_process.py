"""Tests for watcher process module."""

import pytest
import time
import threading
from pathlib import Path

from src.devserver.options import Options
from src.watcher.config import WatcherConfig
from src.watcher.exceptions import WatcherAlreadyRunningError
from src.watcher.models import Role
from src.watcher.process import WatcherProcess
from src.watcher.watch_set import WatchSet


@pytest.fixture
def project(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "sample").mkdir()
    (tmp_path / "src" / "Main.elm").write_text("module Main exposing (main)\n")
    (tmp_path / "sample" / "index.html").write_text("<html><body></body></html>")
    return tmp_path


class Collector:
    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def __call__(self, event):
        with self._lock:
            self.events.append(event)

    def wait_for(self, predicate, timeout=3.0):
        deadline = time.time() + timeout
        while time.time() < deadline:
            with self._lock:
                if any(predicate(e) for e in self.events):
                    return True
            time.sleep(0.05)
        return False


def _process(project, sink):
    options = Options(output_path=Path("sample/app.js"), source_dir=Path("sample"))
    watch_set = WatchSet.from_options(options, base_dir=project)
    return WatcherProcess(watch_set, sink, WatcherConfig(debounce_ms=20, flush_interval_ms=10))


class TestWatcherProcess:
    """Tests for WatcherProcess class."""

    def test_create_process(self, project):
        process = _process(project, Collector())
        assert process.is_running is False

    def test_start_async(self, project):
        process = _process(project, Collector())
        process.start_async()

        assert process.is_running is True
        assert set(process.get_watched_roots()) == {
            (project / "src").resolve(),
            (project / "sample").resolve(),
        }

        process.stop()
        assert process.is_running is False

    def test_start_async_already_running(self, project):
        process = _process(project, Collector())
        process.start_async()

        with pytest.raises(WatcherAlreadyRunningError):
            process.start_async()

        process.stop()

    def test_stop_idempotent(self, project):
        process = _process(project, Collector())
        process.start_async()
        process.stop()
        process.stop()

    def test_context_manager(self, project):
        with _process(project, Collector()) as process:
            process.start_async()
            assert process.is_running

        assert not process.is_running

    def test_delivers_source_change(self, project):
        collector = Collector()
        with _process(project, collector) as process:
            process.start_async()
            time.sleep(0.2)

            (project / "src" / "Main.elm").write_text("module Main exposing (main, view)\n")

            assert collector.wait_for(
                lambda e: e.role is Role.COMPILE and e.path.name == "Main.elm"
            )

    def test_delivers_asset_change(self, project):
        collector = Collector()
        with _process(project, collector) as process:
            process.start_async()
            time.sleep(0.2)

            (project / "sample" / "index.html").write_text("<html><body>hi</body></html>")

            assert collector.wait_for(
                lambda e: e.role is Role.RELOAD and e.path.name == "index.html"
            )

    def test_ignores_files_outside_watch_set(self, project):
        collector = Collector()
        with _process(project, collector) as process:
            process.start_async()
            time.sleep(0.2)

            (project / "sample" / "notes.txt").write_text("draft")
            time.sleep(0.5)

        assert all(e.path.name != "notes.txt" for e in collector.events)
