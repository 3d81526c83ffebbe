from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import Session

from ytfetch.core.timestamps import as_utc
from ytfetch.models import YoutubeVideo

# search.list treats publishedAfter as inclusive, so step past the newest stored video
WATERMARK_STEP = timedelta(seconds=1)


def current_watermark(db: Session, fallback_window: timedelta, now: datetime | None = None) -> datetime:
    """
    Returns the publishedAfter value for the next fetch:
    newest stored published_at + 1s, or `now - fallback_window` on an empty store.
    """
    latest = db.query(YoutubeVideo)\
        .order_by(YoutubeVideo.published_at.desc())\
        .first()

    if latest is not None:
        return as_utc(latest.published_at) + WATERMARK_STEP

    now = now or datetime.now(timezone.utc)
    return as_utc(now) - fallback_window
