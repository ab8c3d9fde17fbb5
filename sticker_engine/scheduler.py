"""
Relayout Scheduler

Decides when a new placement pass is due: once when the catalog first
becomes available, then after a debounced resize that changes the width.
Height-only changes on mobile come from on-screen keyboards and address
bars collapsing and are ignored.
"""

import asyncio
import logging
from typing import Callable, Optional


class RelayoutScheduler:
    """Debounces viewport changes into relayout calls on the running event loop"""

    def __init__(self, relayout: Callable[[], None], debounce_seconds: float = 0.2,
                 is_mobile_width: Optional[Callable[[float], bool]] = None,
                 min_width_delta: float = 1.0):
        """
        Args:
            relayout: Called with no arguments whenever a pass is due
            debounce_seconds: Quiet period after the last resize
            is_mobile_width: Predicate for mobile viewports (default: width <= 640)
            min_width_delta: Smallest width change in pixels that counts
        """
        self.relayout = relayout
        self.debounce_seconds = debounce_seconds
        self.is_mobile_width = is_mobile_width or (lambda width: width <= 640)
        self.min_width_delta = min_width_delta

        self.catalog_ready = False
        self.last_width: Optional[float] = None
        self.last_height: Optional[float] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def catalog_loaded(self) -> bool:
        """Run the first pass when the catalog becomes available. Returns True if it ran."""
        if self.catalog_ready:
            return False
        self.catalog_ready = True
        self._run()
        return True

    def viewport_changed(self, width: float, height: float) -> bool:
        """
        Record a resize and schedule a debounced pass if it matters.

        Must be called from within a running event loop.

        Returns:
            True if a pass was (re)scheduled
        """
        width_changed = (self.last_width is None or
                         abs(width - self.last_width) >= self.min_width_delta)

        if not width_changed:
            if self.is_mobile_width(width) or height == self.last_height:
                self.last_height = height
                return False

        self.last_width = width
        self.last_height = height
        self._schedule()
        return True

    def cancel(self) -> None:
        """Drop a pending pass, if any"""
        if self._pending and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def _schedule(self) -> None:
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._run_later())

    async def _run_later(self) -> None:
        try:
            await asyncio.sleep(self.debounce_seconds)
        except asyncio.CancelledError:
            logging.debug("Pending relayout cancelled")
            raise
        self._pending = None
        self._run()

    def _run(self) -> None:
        if not self.catalog_ready:
            return
        try:
            self.relayout()
        except Exception as e:
            logging.error(f"Relayout failed: {e}")
