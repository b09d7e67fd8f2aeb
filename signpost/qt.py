"""PySide6 glue: timer, web surface and file-change watch."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from PySide6.QtCore import QObject, QTimer, QUrl, Signal
from PySide6.QtGui import QDesktopServices
from PySide6.QtWebEngineCore import QWebEnginePage, QWebEngineSettings
from PySide6.QtWebEngineWidgets import QWebEngineView

from .controller import OPEN_COMMAND, Surface
from .scheduler import DebounceTimer

FILE_CHANGE_POLL_MS = 1200
PAGE_MESSAGE_SCHEME = "signpost"

logger = logging.getLogger(__name__)


class QtSingleShotTimer(DebounceTimer):
    """`DebounceTimer` backed by a single-shot `QTimer`."""

    def __init__(self, parent: QObject | None = None):
        self._timer = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)
        self._callback: Callable[[], None] | None = None

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start(int(delay_ms))

    def cancel(self) -> None:
        self._timer.stop()

    def is_active(self) -> bool:
        return self._timer.isActive()

    def _on_timeout(self) -> None:
        if self._callback is not None:
            self._callback()


class SignpostPage(QWebEnginePage):
    """Page that relays `signpost:` links as structured messages."""

    message_received = Signal(object)

    def acceptNavigationRequest(self, url, nav_type, is_main_frame) -> bool:  # noqa: N802
        if url.scheme() == PAGE_MESSAGE_SCHEME:
            self.message_received.emit({"command": url.path() or OPEN_COMMAND})
            return False
        if nav_type == QWebEnginePage.NavigationType.NavigationTypeLinkClicked and url.scheme() in {"http", "https"}:
            # Keep the preview on the README; web links go to the browser.
            QDesktopServices.openUrl(url)
            return False
        return super().acceptNavigationRequest(url, nav_type, is_main_frame)


class WebSurface(Surface):
    """`QWebEngineView` preview implementing the controller's surface."""

    def __init__(self, on_message: Callable[[dict], None] | None = None, parent=None):
        self.view = QWebEngineView(parent)
        self.page = SignpostPage(self.view)
        self.view.setPage(self.page)
        self.view.settings().setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessFileUrls, True)
        if on_message is not None:
            self.page.message_received.connect(on_message)

    def show_html(self, page: str, base_dir: Path | None) -> None:
        base_url = QUrl.fromLocalFile(f"{base_dir}/") if base_dir is not None else QUrl()
        self.view.setHtml(page, base_url)

    def resource_uri(self, path: Path) -> str:
        return bytes(QUrl.fromLocalFile(str(path)).toEncoded()).decode("ascii")


class FileChangeWatcher(QObject):
    """Poll on-disk signatures of a few files and report edits.

    A path is reported when its `(mtime_ns, size)` changes, including when
    it appears or disappears.
    """

    changed = Signal(str)

    def __init__(self, parent: QObject | None = None, interval_ms: int = FILE_CHANGE_POLL_MS):
        super().__init__(parent)
        self._signatures: dict[Path, tuple[int, int] | None] = {}
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.check_now)

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    @property
    def paths(self) -> list[Path]:
        return list(self._signatures)

    def watch(self, paths) -> None:
        """Replace the watched set, keeping baselines for paths still watched."""
        wanted = {Path(p) for p in paths if p is not None}
        self._signatures = {
            path: self._signatures[path] if path in self._signatures else self._signature(path) for path in wanted
        }

    def check_now(self) -> list[Path]:
        changed: list[Path] = []
        for path, previous in list(self._signatures.items()):
            current = self._signature(path)
            if current == previous:
                continue
            # Update baseline first so one save is reported once.
            self._signatures[path] = current
            changed.append(path)
        for path in changed:
            logger.debug("Detected change on disk: %s", path)
            self.changed.emit(str(path))
        return changed

    @staticmethod
    def _signature(path: Path) -> tuple[int, int] | None:
        try:
            stat = path.stat()
        except OSError:
            return None
        return (int(stat.st_mtime_ns), int(stat.st_size))
