from sqlalchemy.orm import Session
from sqlalchemy import and_, desc, or_

from ytfetch.core.config import settings
from ytfetch.core.timestamps import as_utc, format_rfc3339, parse_rfc3339
from ytfetch.models import YoutubeVideo


class InvalidCursorError(ValueError):
    """The pagination cursor is not a timestamp this service issued."""


# Separates the timestamp from the video_id tie-breaker in a cursor
CURSOR_SEP = "|"


def normalize_limit(limit) -> int:
    """
    Missing, non-numeric or non-positive limits fall back to the default page size.
    Large limits are clamped to MAX_PAGE_LIMIT.
    """
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return settings.DEFAULT_PAGE_LIMIT

    if limit <= 0:
        return settings.DEFAULT_PAGE_LIMIT
    return min(limit, settings.MAX_PAGE_LIMIT)


def decode_cursor(cursor: str):
    """
    Returns (published_at, video_id). A bare timestamp decodes with video_id None
    and excludes every video published at that instant.
    """
    if not isinstance(cursor, str):
        raise InvalidCursorError(f"Invalid cursor: {cursor!r}")

    stamp, sep, video_id = cursor.partition(CURSOR_SEP)
    if sep and not video_id:
        raise InvalidCursorError(f"Invalid cursor: {cursor!r}")
    try:
        return parse_rfc3339(stamp), video_id or None
    except ValueError as e:
        raise InvalidCursorError(f"Invalid cursor: {cursor!r}") from e


def encode_cursor(video: YoutubeVideo, next_video: YoutubeVideo | None = None) -> str:
    """
    The timestamp alone when the page ends on a clean time boundary;
    timestamp|video_id when the next video shares the last one's publish time.
    """
    stamp = format_rfc3339(as_utc(video.published_at))
    if next_video is not None and as_utc(next_video.published_at) == as_utc(video.published_at):
        return f"{stamp}{CURSOR_SEP}{video.video_id}"
    return stamp


class VideoService:
    def __init__(self, db: Session):
        self.db = db

    def list_videos(self, cursor: str | None = None, limit=None) -> dict:
        """
        Newest-first page of stored videos.

        `cursor` is the published_at of the last video of the previous page;
        only videos published strictly before it are returned. When it also
        carries a video_id, videos at that same instant with a smaller id follow.
        """
        limit = normalize_limit(limit)

        base = self.db.query(YoutubeVideo)
        total = base.count()

        query = base
        if cursor:
            published_at, video_id = decode_cursor(cursor)
            if video_id is None:
                query = query.filter(YoutubeVideo.published_at < published_at)
            else:
                query = query.filter(or_(
                    YoutubeVideo.published_at < published_at,
                    and_(YoutubeVideo.published_at == published_at, YoutubeVideo.video_id < video_id),
                ))

        # One extra row tells us whether another page exists
        rows = query.order_by(desc(YoutubeVideo.published_at), desc(YoutubeVideo.video_id))\
                    .limit(limit + 1)\
                    .all()

        has_more = len(rows) > limit
        videos = rows[:limit]
        next_cursor = encode_cursor(videos[-1], rows[limit]) if has_more else None

        return {
            "videos": videos,
            "total": total,
            "limit": limit,
            "next_cursor": next_cursor,
            "has_more": has_more,
        }
