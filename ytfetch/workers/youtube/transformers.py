from datetime import datetime, timezone
from ytfetch.core.timestamps import parse_rfc3339
from ytfetch.models import YoutubeVideo

# ---------------------------------------------------------
# HELPER: Safe Thumbnail Extraction
# ---------------------------------------------------------
def get_thumb(thumbnails):
    """Safely extracts the best available thumbnail url."""
    if not thumbnails:
        return None
    for size in ["default", "medium", "high"]:
        if size in thumbnails:
            return thumbnails[size].get("url")
    return None


def transform_search_items(items, now=None) -> list[YoutubeVideo]:
    """
    Turns raw search.list items into YoutubeVideo rows, oldest first.

    Raises KeyError/ValueError on items without a video id or with an
    unparsable publishedAt; the caller decides how to report it.
    """
    now = now or datetime.now(timezone.utc)
    videos = []

    for item in items:
        snip = item["snippet"]
        videos.append(
            YoutubeVideo(
                video_id=item["id"]["videoId"],
                title=snip.get("title", ""),
                description=snip.get("description", ""),
                thumbnail_url=get_thumb(snip.get("thumbnails", {})),
                published_at=parse_rfc3339(snip["publishedAt"]),
                channel_title=snip.get("channelTitle"),
                channel_id=snip.get("channelId"),
                created_at=now,
                updated_at=now,
            )
        )

    videos.sort(key=lambda v: v.published_at)
    return videos
