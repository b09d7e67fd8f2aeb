"""Debounced render scheduling."""

from __future__ import annotations

import logging
from typing import Callable

DEFAULT_DEBOUNCE_MS = 100

logger = logging.getLogger(__name__)


class DebounceTimer:
    """Single-slot cancellable timer used by `RenderScheduler`.

    Implementations arm one deferred callback at a time; `start` replaces
    whatever was armed before.
    """

    def start(self, delay_ms: int, callback: Callable[[], None]) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError

    def is_active(self) -> bool:
        raise NotImplementedError


class RenderScheduler:
    """Coalesce bursts of render requests into one call after a quiet period."""

    def __init__(self, callback: Callable[[], None], timer: DebounceTimer, delay_ms: int = DEFAULT_DEBOUNCE_MS):
        self._callback = callback
        self._timer = timer
        self.delay_ms = max(0, int(delay_ms))

    @property
    def pending(self) -> bool:
        return self._timer.is_active()

    def schedule(self) -> None:
        """Drop any armed job and re-arm for a full quiet period."""
        if self._timer.is_active():
            logger.debug("Render re-armed; previous request superseded")
        self._timer.cancel()
        self._timer.start(self.delay_ms, self._fire)

    def cancel(self) -> None:
        self._timer.cancel()

    def _fire(self) -> None:
        # Clear the slot first so the callback may schedule again.
        self._timer.cancel()
        self._callback()
