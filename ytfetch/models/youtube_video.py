from sqlalchemy import Column, String, Text, TIMESTAMP
from ytfetch.core.database import Base

class YoutubeVideo(Base):
    __tablename__ = "youtube_videos"

    video_id = Column(String(64), primary_key=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text)
    thumbnail_url = Column(String(255))

    # Sole ordering key for pagination and the fetch watermark
    published_at = Column(TIMESTAMP(timezone=True), nullable=False, index=True)

    channel_title = Column(String(255))
    channel_id = Column(String(255))

    created_at = Column(TIMESTAMP(timezone=True))
    updated_at = Column(TIMESTAMP(timezone=True))
