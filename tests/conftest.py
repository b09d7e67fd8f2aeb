"""
Shared test fixtures: simulated clock timer, recording surface, README trees.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from signpost.controller import Surface, ViewController
from signpost.scheduler import DebounceTimer


class ManualTimer(DebounceTimer):
    """Single-slot timer driven by a simulated millisecond clock."""

    def __init__(self) -> None:
        self.now = 0
        self.deadline: int | None = None
        self._callback = None
        self.fired_at: list[int] = []

    def start(self, delay_ms, callback) -> None:
        self.deadline = self.now + int(delay_ms)
        self._callback = callback

    def cancel(self) -> None:
        self.deadline = None
        self._callback = None

    def is_active(self) -> bool:
        return self.deadline is not None

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while self.deadline is not None and self.deadline <= target:
            self.now = self.deadline
            callback = self._callback
            self.deadline = None
            self._callback = None
            self.fired_at.append(self.now)
            callback()
        self.now = target


class RecordingSurface(Surface):
    """Surface that keeps every page it was asked to show."""

    def __init__(self) -> None:
        self.pages: list[tuple[str, Path | None]] = []

    def show_html(self, page, base_dir) -> None:
        self.pages.append((page, base_dir))

    @property
    def last_page(self) -> str:
        return self.pages[-1][0]


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace with READMEs at the root, in `a/` and in `b/`.

    Layout::

        ws/README.md
        ws/a/README.md
        ws/a/b/c/deep.py
        ws/b/README.md
        ws/b/mod.py
        ws/plain/file.txt
    """
    root = tmp_path / "ws"
    (root / "a" / "b" / "c").mkdir(parents=True)
    (root / "b").mkdir()
    (root / "plain").mkdir()
    (root / "README.md").write_text("# Workspace\n", encoding="utf-8")
    (root / "a" / "README.md").write_text("# Package A\n\n![logo](./logo.png)\n", encoding="utf-8")
    (root / "a" / "b" / "c" / "deep.py").write_text("x = 1\n", encoding="utf-8")
    (root / "b" / "README.md").write_text("# Package B\n", encoding="utf-8")
    (root / "b" / "mod.py").write_text("y = 2\n", encoding="utf-8")
    (root / "plain" / "file.txt").write_text("text\n", encoding="utf-8")
    return root


@pytest.fixture
def opened() -> list[Path]:
    return []


@pytest.fixture
def controller(timer: ManualTimer, workspace: Path, opened: list[Path]) -> ViewController:
    return ViewController(timer, workspace_root=workspace, open_document=opened.append)
