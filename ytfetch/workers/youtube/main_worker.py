"""
ytfetch/workers/youtube/main_worker.py

One fetch cycle of the incremental YouTube poller:

  1. Compute the watermark from the newest stored video
  2. Ask search.list for everything published since then
  3. Upsert the batch into youtube_videos

Runs on a timer from ytfetch.scheduler, or once from the command line:

    python -m ytfetch.workers.youtube.main_worker
"""

import logging
from datetime import timedelta
from sqlalchemy.orm import Session

from ytfetch.core.config import settings
from ytfetch.core.database import Base, SessionLocal, engine
from ytfetch.workers.youtube.bulk_writer import bulk_write_videos
from ytfetch.workers.youtube.key_manager import APIKeyManager
from ytfetch.workers.youtube.watermark import current_watermark
from ytfetch.workers.youtube.youtube_search import YoutubeSearchClient


logger = logging.getLogger(__name__)


def build_client() -> YoutubeSearchClient:
    """Builds the search client from settings. Raises NoAPIKeysError without keys."""
    key_manager = APIKeyManager(settings.YOUTUBE_API_KEYS)
    return YoutubeSearchClient(
        key_manager,
        max_results=settings.MAX_RESULTS,
        timeout=settings.REQUEST_TIMEOUT,
    )


def run_fetch_cycle(
    db: Session,
    client: YoutubeSearchClient,
    query: str,
    fallback_window: timedelta,
) -> int:
    """
    Runs one watermark → search → store pass and returns how many videos were written.
    Errors propagate; the scheduler decides what to do with them.
    """
    published_after = current_watermark(db, fallback_window)
    videos = client.fetch_since(query, published_after)

    if not videos:
        logger.info(f"📭 No new videos for '{query}' since {published_after.isoformat()}")
        return 0

    stored = bulk_write_videos(db, videos)
    logger.info(f"💾 Stored {stored} videos for '{query}'")
    return stored


def run(client: YoutubeSearchClient | None = None) -> int:
    """Opens a session and runs a single cycle with the configured query."""
    client = client or build_client()
    db = SessionLocal()
    try:
        return run_fetch_cycle(
            db,
            client,
            settings.SEARCH_QUERY,
            timedelta(hours=settings.FALLBACK_WINDOW_HOURS),
        )
    finally:
        db.close()


# ── CLI entry ──────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    Base.metadata.create_all(bind=engine)
    run()
