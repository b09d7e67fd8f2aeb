"""
Tests for the PySide6 glue: single-shot timer and file-change watch.
"""

from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("PySide6.QtWebEngineWidgets")

from PySide6.QtCore import QCoreApplication, QEventLoop, QTimer  # noqa: E402

from signpost.qt import FileChangeWatcher, QtSingleShotTimer  # noqa: E402
from signpost.scheduler import RenderScheduler  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QCoreApplication.instance() or QCoreApplication([])


def spin(ms: int) -> None:
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


def test_single_shot_timer_replaces_pending_callback(qapp):
    fired = []
    timer = QtSingleShotTimer()

    timer.start(20, lambda: fired.append("first"))
    timer.start(20, lambda: fired.append("second"))
    assert timer.is_active()
    spin(150)

    assert fired == ["second"]
    assert not timer.is_active()


def test_single_shot_timer_cancel(qapp):
    fired = []
    timer = QtSingleShotTimer()

    timer.start(20, lambda: fired.append(1))
    timer.cancel()
    spin(100)

    assert fired == []


def test_scheduler_on_qt_timer_coalesces(qapp):
    renders = []
    scheduler = RenderScheduler(lambda: renders.append(1), QtSingleShotTimer(), delay_ms=30)

    for _ in range(5):
        scheduler.schedule()
    spin(200)

    assert renders == [1]


def test_watcher_reports_each_change_once(qapp, tmp_path: Path):
    readme = tmp_path / "README.md"
    readme.write_text("# one\n", encoding="utf-8")
    emitted = []
    watcher = FileChangeWatcher()
    watcher.changed.connect(emitted.append)

    watcher.watch([readme, None])
    assert watcher.paths == [readme]
    assert watcher.check_now() == []

    readme.write_text("# one, edited\n", encoding="utf-8")
    assert watcher.check_now() == [readme]
    assert watcher.check_now() == []

    readme.unlink()
    assert watcher.check_now() == [readme]
    assert emitted == [str(readme), str(readme)]


def test_watcher_reports_new_file(qapp, tmp_path: Path):
    readme = tmp_path / "README.md"
    watcher = FileChangeWatcher()
    watcher.watch([readme])

    readme.write_text("# new\n", encoding="utf-8")

    assert watcher.check_now() == [readme]


def test_watcher_keeps_baseline_for_rewatched_paths(qapp, tmp_path: Path):
    readme = tmp_path / "README.md"
    readme.write_text("# one\n", encoding="utf-8")
    watcher = FileChangeWatcher()
    watcher.watch([readme])

    readme.write_text("# one, edited\n", encoding="utf-8")
    watcher.watch([readme, tmp_path / "other.md"])

    assert watcher.check_now() == [readme]
