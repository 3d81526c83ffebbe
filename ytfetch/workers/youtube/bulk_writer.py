from datetime import datetime, timezone
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ytfetch.core.timestamps import as_utc
from ytfetch.models import YoutubeVideo

# Columns refreshed when a video is seen again; created_at is left alone
UPSERT_COLUMNS = [
    "title",
    "description",
    "thumbnail_url",
    "published_at",
    "channel_title",
    "channel_id",
]


def obj_to_dict(obj):
    return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Upsert is not supported on '{dialect}'")


def bulk_write_videos(db: Session, videos: list[YoutubeVideo]) -> int:
    """
    Upserts a batch of videos keyed by video_id in a single statement and commits.
    Either the whole batch is stored or the session is rolled back and the error raised.
    """
    if not videos:
        return 0

    now = datetime.now(timezone.utc)
    # One row per video_id; ON CONFLICT cannot touch the same row twice in one statement
    rows_by_id = {}
    for v in videos:
        row = obj_to_dict(v)
        row["published_at"] = as_utc(row["published_at"])
        row["created_at"] = row["created_at"] or now
        row["updated_at"] = now
        rows_by_id[row["video_id"]] = row
    rows = list(rows_by_id.values())

    insert = _insert_for(db)
    stmt = insert(YoutubeVideo).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=["video_id"],
        set_={
            **{col: stmt.excluded[col] for col in UPSERT_COLUMNS},
            "updated_at": now,
        },
    )

    try:
        db.execute(stmt)
        db.commit()
    except Exception:
        db.rollback()
        raise

    return len(rows)
