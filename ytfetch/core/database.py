from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ytfetch.core.config import settings


def _engine_kwargs(
    url: str,
    statement_timeout_ms: int = settings.DB_STATEMENT_TIMEOUT,
    pool_timeout: int = settings.DB_POOL_TIMEOUT,
) -> dict:
    """
    Every store call gets a deadline: Postgres cancels statements after
    statement_timeout_ms, SQLite gives up waiting on a locked database.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False, "timeout": statement_timeout_ms / 1000}}
        # In-memory SQLite lives inside one connection, so every session must share it
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    return {
        "pool_pre_ping": True,
        "pool_timeout": pool_timeout,
        "connect_args": {
            "options": f"-c statement_timeout={statement_timeout_ms}",
            "connect_timeout": pool_timeout,
        },
    }


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
