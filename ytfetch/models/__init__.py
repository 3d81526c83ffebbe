from .youtube_video import YoutubeVideo

__all__ = [
    "YoutubeVideo",
]
