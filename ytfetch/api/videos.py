import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional

from ytfetch.core.database import SessionLocal
from ytfetch.schemas.video import VideoListResponse
from ytfetch.services.video_service import InvalidCursorError, VideoService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/videos", tags=["Videos"])

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# ---------------------------------------------------------
# LATEST VIDEOS (cursor pagination, newest first)
# ---------------------------------------------------------
@router.get("", response_model=VideoListResponse, response_model_exclude_none=True)
def get_latest_videos(
    cursor: Optional[str] = None,
    # Kept as a string so junk values fall back to the default instead of a 422
    limit: Optional[str] = None,
    db: Session = Depends(get_db),
):
    service = VideoService(db)
    try:
        return service.list_videos(cursor, limit)
    except InvalidCursorError:
        raise HTTPException(status_code=400, detail="Invalid cursor")
    except SQLAlchemyError:
        logger.exception("❌ Failed to fetch videos")
        raise HTTPException(status_code=500, detail="Failed to fetch videos")
