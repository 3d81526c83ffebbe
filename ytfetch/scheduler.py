import logging
import threading
from functools import partial
from apscheduler.schedulers.background import BackgroundScheduler

from ytfetch.core.config import settings
from ytfetch.workers.youtube.main_worker import build_client, run as run_youtube

logger = logging.getLogger(__name__)

JOB_ID = "youtube_fetch"


class FetchCoordinator:
    """
    Runs the YouTube fetch cycle on a fixed interval in a background thread.

    Stopped → start() → Running → stop() → Stopped.
    stop() is one-shot: calling it on a stopped coordinator raises
    apscheduler's SchedulerNotRunningError.
    """

    def __init__(self, cycle=None, interval_seconds: int | None = None, client=None):
        if cycle is None:
            # One client for the process so the active key carries over between ticks
            client = client or build_client()
            cycle = partial(run_youtube, client)
        self.client = client
        self._cycle = cycle
        self.interval_seconds = interval_seconds or settings.FETCH_INTERVAL
        self._busy = threading.Lock()
        self.last_error: Exception | None = None
        self._scheduler = BackgroundScheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def key_status(self) -> dict | None:
        """Key pool snapshot of the search client, when this coordinator owns one."""
        if self.client is None:
            return None
        return self.client.key_manager.status()

    # ---------------------------------------------------------
    # WRAPPER: one guarded cycle
    # ---------------------------------------------------------
    def run_once(self) -> int | None:
        """
        Runs a single cycle unless one is already in flight.
        Returns the number of stored videos, or None when skipped or failed.
        Failures are logged and never escape, so the timer keeps going.
        """
        if not self._busy.acquire(blocking=False):
            logger.warning("⏭️  Scheduler: previous fetch still running, skipping this tick.")
            return None

        try:
            logger.info("🔄 Scheduler: Starting YouTube fetch...")
            stored = self._cycle()
            self.last_error = None
            logger.info(f"✅ Scheduler: Fetch done, {stored} videos stored.")
            return stored
        except Exception as e:
            self.last_error = e
            logger.exception("❌ Scheduler Error (YouTube fetch)")
            return None
        finally:
            self._busy.release()

    # ---------------------------------------------------------
    # SCHEDULER SETUP
    # ---------------------------------------------------------
    def start(self):
        if self._scheduler.running:
            return

        self._scheduler.add_job(
            self.run_once,
            "interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(f"🚀 Background fetcher started (every {self.interval_seconds}s).")

    def stop(self, wait: bool = True):
        """Stops scheduling new cycles; a cycle already running is allowed to finish."""
        self._scheduler.shutdown(wait=wait)
        if self.client is not None:
            self.client.close()
        logger.info("🛑 Background fetcher stopped.")
