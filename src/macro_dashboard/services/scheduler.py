"""Background refresh scheduler serializing synchronization cycles."""

import logging
import threading
from typing import Callable, Optional

from macro_dashboard.domain.views import MarketSnapshot

logger = logging.getLogger(__name__)

RefreshCycle = Callable[[], MarketSnapshot]


class RefreshScheduler:
    """
    Runs refresh cycles on a background thread and on demand.

    All cycles go through one lock, so at most one synchronization is in
    flight. A background tick that finds a cycle running is skipped; an
    on-demand call waits for it.
    """

    def __init__(self, cycle: Optional[RefreshCycle] = None, tick_seconds: float = 60):
        self._cycle = cycle
        self._tick_seconds = tick_seconds
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(
        self,
        cycle: Optional[RefreshCycle] = None,
        blocking: bool = True,
    ) -> Optional[MarketSnapshot]:
        """
        Run one cycle under the scheduler lock.

        Uses the given cycle or the scheduler's own. Returns None if not
        blocking and a cycle is already in flight.
        """
        cycle = cycle or self._cycle
        if cycle is None:
            raise ValueError("No refresh cycle configured")

        if not self._lock.acquire(blocking=blocking):
            return None
        try:
            return cycle()
        finally:
            self._lock.release()

    def start(self) -> None:
        """Start the background thread (no-op if already running)."""
        if self.is_running:
            return
        if self._cycle is None:
            raise ValueError("No refresh cycle configured")

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="refresh-scheduler", daemon=True)
        self._thread.start()
        logger.info(f"Refresh scheduler started (tick every {self._tick_seconds}s)")

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the background thread to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            logger.info("Refresh scheduler stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                if self.run_once(blocking=False) is None:
                    logger.info("Refresh tick skipped: a cycle is already running")
            except Exception:
                # Keep ticking; the next cycle retries every due source
                logger.exception("Refresh cycle failed")
            self._stop_event.wait(self._tick_seconds)


# Global scheduler instance (replaced by the application at startup)
_scheduler: Optional[RefreshScheduler] = None


def get_scheduler() -> RefreshScheduler:
    """Return the current scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = RefreshScheduler()
    return _scheduler


def set_scheduler(scheduler: Optional[RefreshScheduler]) -> None:
    """Set the global scheduler instance."""
    global _scheduler
    _scheduler = scheduler
