"""View controller tying resolution, scheduling and rendering together."""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Callable

from .renderer import MarkdownRenderer, compose_page
from .resolver import README_NAME, find_readme, is_readme_path
from .scheduler import DEFAULT_DEBOUNCE_MS, DebounceTimer, RenderScheduler

logger = logging.getLogger(__name__)

OPEN_COMMAND = "open"


class ViewState(enum.Enum):
    DETACHED = "detached"
    IDLE = "idle"
    PENDING = "pending"


class Surface:
    """Display surface the controller renders into.

    Hosts subclass this (or provide the same two methods).
    """

    def show_html(self, page: str, base_dir: Path | None) -> None:
        raise NotImplementedError

    def resource_uri(self, path: Path) -> str:
        """Translate a local file path into an address the surface can load."""
        return path.as_uri()


class ViewController:
    """Keeps the surface showing the README nearest to the current context.

    Context is, in order of precedence: an explicit override directory, the
    directory of the active document, the workspace root. It is read fresh
    when a render runs, never captured when one is scheduled.
    """

    def __init__(
        self,
        timer: DebounceTimer,
        *,
        workspace_root: Path | None = None,
        open_document: Callable[[Path], None] | None = None,
        renderer: MarkdownRenderer | None = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        self._surface: Surface | None = None
        self._workspace_root = Path(workspace_root) if workspace_root is not None else None
        self._open_document = open_document
        self._renderer = renderer or MarkdownRenderer()
        self._scheduler = RenderScheduler(self.render, timer, debounce_ms)
        self._active_document: Path | None = None
        self._override: Path | None = None
        self._resolved_document: Path | None = None

    @property
    def state(self) -> ViewState:
        if self._surface is None:
            return ViewState.DETACHED
        if self._scheduler.pending:
            return ViewState.PENDING
        return ViewState.IDLE

    @property
    def surface(self) -> Surface | None:
        return self._surface

    @property
    def workspace_root(self) -> Path | None:
        return self._workspace_root

    @workspace_root.setter
    def workspace_root(self, root: Path | None) -> None:
        self._workspace_root = Path(root) if root is not None else None
        self._override = None
        self.schedule_render()

    @property
    def active_document(self) -> Path | None:
        return self._active_document

    @property
    def override(self) -> Path | None:
        return self._override

    @property
    def resolved_document(self) -> Path | None:
        return self._resolved_document

    @property
    def context(self) -> Path | None:
        """Directory the next resolution starts from."""
        if self._override is not None:
            return self._override
        if self._active_document is not None:
            return self._active_document.parent
        return self._workspace_root

    def attach(self, surface: Surface) -> None:
        """Attach a surface and render into it right away."""
        self._surface = surface
        self.render()

    def detach(self) -> None:
        self._scheduler.cancel()
        self._surface = None

    def schedule_render(self) -> None:
        """Request a render once input settles; dropped while detached."""
        if self._surface is None:
            return
        self._scheduler.schedule()

    def on_active_document_changed(self, path: Path | None) -> None:
        self._active_document = Path(path) if path is not None else None
        self._override = None
        self.schedule_render()

    def on_document_saved(self, path: Path) -> None:
        if is_readme_path(path):
            self.schedule_render()

    def show_readme_for(self, resource: Path) -> None:
        """Pin the context to `resource` (a directory) or its parent (a file)."""
        resource = Path(resource)
        self._override = resource if resource.is_dir() else resource.parent
        self.schedule_render()

    def open_resolved(self) -> None:
        if self._resolved_document is None:
            logger.debug("Open requested with no resolved %s", README_NAME)
            return
        if self._open_document is not None:
            self._open_document(self._resolved_document)

    def handle_message(self, message: dict) -> None:
        """Handle a structured message relayed from the rendered page."""
        if message.get("command") == OPEN_COMMAND:
            self.open_resolved()
        else:
            logger.debug("Ignoring page message: %r", message)

    def render(self) -> None:
        """Resolve, read and render the README for the current context."""
        surface = self._surface
        if surface is None:
            return

        readme = find_readme(self.context, self._workspace_root)
        markdown_text = None
        if readme is not None:
            try:
                markdown_text = readme.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                # The file can vanish between the lookup and the read.
                logger.warning("Could not read %s: %s", readme, exc)
                readme = None
        self._resolved_document = readme

        body = self._renderer.render(markdown_text, readme, surface.resource_uri)
        page = compose_page(body, self._open_label(readme), title=readme.name if readme else README_NAME)
        surface.show_html(page, readme.parent if readme is not None else self._workspace_root)

    def _open_label(self, readme: Path | None) -> str | None:
        if readme is None:
            return None
        if self._workspace_root is not None:
            try:
                return f"Open {readme.relative_to(self._workspace_root)}"
            except ValueError:
                pass
        return f"Open {readme}"
