"""signpost: live preview of the README nearest to what you are working on."""

from __future__ import annotations

import argparse
import logging
import subprocess
import sys
from pathlib import Path

from PySide6.QtCore import QDir, Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QApplication,
    QFileSystemModel,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMenu,
    QMessageBox,
    QPushButton,
    QSizePolicy,
    QSplitter,
    QTreeView,
    QVBoxLayout,
    QWidget,
)

from . import config
from .controller import ViewController
from .qt import FileChangeWatcher, QtSingleShotTimer, WebSurface
from .resolver import README_NAME

logger = logging.getLogger(__name__)


def readme_watch_paths(resolved: Path | None, context: Path | None) -> list[Path]:
    """Files whose edits can change the preview.

    The resolved README, plus a README appearing right in the context directory.
    """
    paths = [resolved] if resolved is not None else []
    if context is not None and context / README_NAME not in paths:
        paths.append(context / README_NAME)
    return paths


class SignpostWindow(QMainWindow):
    """Workspace tree beside a live README preview.

    Selecting a file in the tree makes it the active document.
    """

    def __init__(self, root: Path, config_path: Path, *, debounce_ms: int, editor_argv: list[str]):
        super().__init__()
        self.root = root.resolve()
        self.config_path = config_path
        self.editor_argv = editor_argv
        self.controller = ViewController(
            QtSingleShotTimer(self),
            workspace_root=self.root,
            open_document=self._open_in_editor,
            debounce_ms=debounce_ms,
        )

        self.setWindowTitle("signpost")
        self.resize(1280, 860)

        self.model = QFileSystemModel(self)
        self.model.setFilter(QDir.AllDirs | QDir.NoDotAndDotDot | QDir.Files)

        self.tree = QTreeView()
        self.tree.setModel(self.model)
        self.tree.setHeaderHidden(True)
        for column in (1, 2, 3):
            self.tree.hideColumn(column)
        self.tree.setMinimumWidth(240)
        self.tree.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self._show_tree_context_menu)
        self.tree.selectionModel().currentChanged.connect(self._on_tree_selection_changed)

        self.surface = WebSurface(on_message=self.controller.handle_message)

        self.up_btn = QPushButton("^")
        self.up_btn.clicked.connect(self._go_up_directory)

        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(self.controller.schedule_render)

        open_btn = QPushButton("Open")
        open_btn.setToolTip(f"Open the previewed {README_NAME} in the editor")
        open_btn.clicked.connect(self.controller.open_resolved)

        self.path_label = QLabel("")

        top_bar = QHBoxLayout()
        top_bar.setContentsMargins(0, 0, 0, 0)
        top_bar.addWidget(self.up_btn)
        top_bar.addWidget(refresh_btn)
        top_bar.addWidget(open_btn)
        top_bar.addWidget(self.path_label, 1)

        top_bar_widget = QWidget()
        top_bar_widget.setLayout(top_bar)
        top_bar_widget.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)

        self.splitter = QSplitter(Qt.Horizontal)
        self.splitter.addWidget(self.tree)
        self.splitter.addWidget(self.surface.view)
        self.splitter.setChildrenCollapsible(False)
        self.splitter.setStretchFactor(0, 1)
        self.splitter.setStretchFactor(1, 3)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addWidget(top_bar_widget)
        layout.addWidget(self.splitter, 1)
        self.setCentralWidget(central)

        self.watcher = FileChangeWatcher(self)
        self.watcher.changed.connect(self._on_file_changed_on_disk)
        self.surface.view.loadFinished.connect(self._on_preview_load_finished)

        refresh_action = QAction("Refresh", self)
        refresh_action.setShortcut("F5")
        refresh_action.triggered.connect(self.controller.schedule_render)
        self.addAction(refresh_action)

        self._set_root_directory(self.root)
        self.controller.attach(self.surface)
        self.watcher.start()

    def select_file(self, path: Path) -> None:
        """Make `path` the active document, as if picked in the tree."""
        index = self.model.index(str(path))
        if index.isValid():
            self.tree.setCurrentIndex(index)
        else:
            self.controller.on_active_document_changed(path)

    def _set_root_directory(self, new_root: Path) -> None:
        self.root = new_root.resolve()
        root_index = self.model.setRootPath(str(self.root))
        self.tree.setRootIndex(root_index)
        self.tree.clearSelection()
        self.up_btn.setEnabled(self.root.parent != self.root)
        self.setWindowTitle(f"signpost - {self.root}")
        self.controller.on_active_document_changed(None)
        self.controller.workspace_root = self.root

    def _go_up_directory(self) -> None:
        parent = self.root.parent
        if parent == self.root:
            return
        self._set_root_directory(parent)

    def _on_tree_selection_changed(self, current, _previous) -> None:
        path = Path(self.model.filePath(current))
        if path.is_file():
            self.controller.on_active_document_changed(path)

    def _show_tree_context_menu(self, pos) -> None:
        index = self.tree.indexAt(pos)
        if not index.isValid():
            return
        path = Path(self.model.filePath(index))

        menu = QMenu(self)
        show_action = menu.addAction(f"Show {README_NAME} for this item")
        root_action = menu.addAction("Use as workspace root") if path.is_dir() else None
        chosen = menu.exec(self.tree.viewport().mapToGlobal(pos))
        if chosen is None:
            return
        if chosen == show_action:
            self.controller.show_readme_for(path)
        elif root_action is not None and chosen == root_action:
            self._set_root_directory(path)

    def _on_file_changed_on_disk(self, path_text: str) -> None:
        self.controller.on_document_saved(Path(path_text))

    def _on_preview_load_finished(self, _ok: bool) -> None:
        resolved = self.controller.resolved_document
        self.watcher.watch(readme_watch_paths(resolved, self.controller.context))
        if resolved is None:
            self.path_label.setText(f"No {README_NAME} found")
            self.statusBar().showMessage(f"No {README_NAME} above {self.controller.context}", 3000)
            return
        try:
            self.path_label.setText(str(resolved.relative_to(self.root)))
        except ValueError:
            self.path_label.setText(str(resolved))

    def _open_in_editor(self, path: Path) -> None:
        try:
            subprocess.Popen([*self.editor_argv, str(path)])
        except FileNotFoundError:
            logger.exception("Editor launcher %r not found", self.editor_argv[0])
            QMessageBox.critical(
                self,
                "Editor not found",
                f"Could not find '{self.editor_argv[0]}' in PATH. Set SIGNPOST_EDITOR to your editor command.",
            )

    def closeEvent(self, event) -> None:  # noqa: N802
        self.watcher.stop()
        self.controller.detach()
        config.persist_root(self.root, self.config_path)
        super().closeEvent(event)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signpost",
        description=f"Preview the {README_NAME} nearest to the file you are working on.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help=f"Workspace root (default: path in ~/{config.CONFIG_FILE_NAME}, or home directory).",
    )
    parser.add_argument("--file", default=None, help="Start with this file as the active document.")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity (default: SIGNPOST_LOG_LEVEL or WARNING).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level or config.log_level_from_env(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    root = Path(args.path).expanduser() if args.path is not None else config.load_default_root()
    if not root.exists():
        print(f"Path does not exist: {root}", file=sys.stderr)
        return 2
    if not root.is_dir():
        print(f"Path is not a directory: {root}", file=sys.stderr)
        return 2

    app = QApplication(sys.argv[:1])
    app.setApplicationName("signpost")
    app.setDesktopFileName("signpost")

    window = SignpostWindow(
        root,
        config.config_file_path(),
        debounce_ms=config.debounce_ms_from_env(),
        editor_argv=config.editor_command(),
    )
    if args.file:
        window.select_file(Path(args.file).expanduser().resolve())
    window.show()
    return app.exec()
