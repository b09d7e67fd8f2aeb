"""Nearest-ancestor README lookup."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

README_NAME = "README.md"

# Save notifications are matched case-insensitively; lookup is exact.
_README_SAVE_RE = re.compile(r"README\.md$", re.IGNORECASE)

logger = logging.getLogger(__name__)


def find_readme(start: Path | None, root: Path | None = None) -> Path | None:
    """Return the first `README.md` found walking up from `start`.

    The walk is inclusive of `start` and stops after checking `root`. With
    no root the walk continues up to the filesystem root.
    """
    if start is None:
        return None

    # Both ends are compared as absolute paths.
    current = Path(os.path.abspath(start))
    boundary = Path(os.path.abspath(root)) if root is not None else None
    while True:
        candidate = current / README_NAME
        if candidate.is_file():
            logger.debug("Resolved %s from %s", candidate, start)
            return candidate
        if boundary is not None and current == boundary:
            break
        parent = current.parent
        if parent == current:
            break
        current = parent

    logger.debug("No %s above %s (root: %s)", README_NAME, start, boundary)
    return None


def is_readme_path(path: Path | str) -> bool:
    """True when a saved file should trigger a README refresh."""
    return bool(_README_SAVE_RE.search(str(path)))
