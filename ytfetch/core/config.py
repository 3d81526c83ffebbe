import os
from urllib.parse import quote_plus
from dotenv import load_dotenv

load_dotenv()


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _load_api_keys() -> list[str]:
    """
    Reads the YouTube key pool from the environment.
    Supports the comma separated YOUTUBE_API_KEYS list and
    numbered keys (YOUTUBE_API_KEY_1..N), in that order.
    """
    keys = [k.strip() for k in os.getenv("YOUTUBE_API_KEYS", "").split(",") if k.strip()]

    i = 1
    while True:
        key = os.getenv(f"YOUTUBE_API_KEY_{i}")
        if not key:
            break
        if key.strip() not in keys:
            keys.append(key.strip())
        i += 1

    return keys


class Settings:
    # DATABASE
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = _get_int("DB_PORT", 5432)
    DB_NAME = os.getenv("DB_NAME", "ytfetch")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DATABASE_URL = os.getenv(
        "DATABASE_URL",
        f"postgresql://{DB_USER}:{quote_plus(DB_PASSWORD)}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
    )
    DB_STATEMENT_TIMEOUT = _get_int("DB_STATEMENT_TIMEOUT", 30000)  # milliseconds
    DB_POOL_TIMEOUT = _get_int("DB_POOL_TIMEOUT", 30)  # seconds

    # YOUTUBE
    YOUTUBE_API_KEYS = _load_api_keys()
    SEARCH_QUERY = os.getenv("SEARCH_QUERY", "cricket")
    MAX_RESULTS = _get_int("MAX_RESULTS", 25)
    REQUEST_TIMEOUT = _get_int("REQUEST_TIMEOUT", 30)

    # FETCH LOOP
    FETCH_INTERVAL = _get_int("FETCH_INTERVAL", 10)  # seconds
    FALLBACK_WINDOW_HOURS = _get_int("FALLBACK_WINDOW_HOURS", 24)

    # API
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
    DEFAULT_PAGE_LIMIT = 10
    MAX_PAGE_LIMIT = 100

settings = Settings()
