"""
ytfetch/workers/youtube/youtube_search.py

Fetches the newest videos for one query from YouTube Data API v3 search.list.

  ✅ Uses the APIKeyManager pool; the active key survives between calls
  ✅ 403 quotaExceeded → rotate key, rebuild the session, retry the same request
  ✅ Rotation is bounded by the pool size (AllKeysExhaustedError after that)
  ✅ Any other failure is raised unretried as YoutubeAPIError
"""

import logging
import requests
from datetime import datetime

from ytfetch.core.timestamps import format_rfc3339
from ytfetch.models import YoutubeVideo
from ytfetch.workers.youtube.key_manager import APIKeyManager
from ytfetch.workers.youtube.transformers import transform_search_items


logger = logging.getLogger(__name__)

BASE_URL = "https://www.googleapis.com/youtube/v3/search"

# search.list refuses maxResults above 50
MAX_RESULTS_CAP = 50

QUOTA_REASONS = {"quotaExceeded", "dailyLimitExceeded"}


class YoutubeAPIError(Exception):
    """Any search.list failure that is not recovered inside the client."""


class QuotaExceededError(YoutubeAPIError):
    """The active key has used up its quota."""


class AllKeysExhaustedError(YoutubeAPIError):
    """Every key in the pool answered with a quota error."""


def _error_reasons(resp) -> set[str]:
    """Pulls the structured `error.errors[].reason` values out of an error body."""
    try:
        body = resp.json()
    except ValueError:
        return set()

    error = body.get("error", {}) if isinstance(body, dict) else {}
    if not isinstance(error, dict):
        return set()
    return {e.get("reason") for e in error.get("errors", []) if isinstance(e, dict)}


class YoutubeSearchClient:
    def __init__(self, key_manager: APIKeyManager, max_results: int = 25, timeout: float = 30):
        self.key_manager = key_manager
        self.max_results = max(1, min(max_results, MAX_RESULTS_CAP))
        self.timeout = timeout
        self._session = self._build_session()

    def _build_session(self) -> requests.Session:
        return requests.Session()

    def _rotate(self):
        self.key_manager.rotate()
        self._session.close()
        self._session = self._build_session()

    def _search(self, params: dict) -> dict:
        """One HTTP call. Classifies the response, never retries."""
        try:
            resp = self._session.get(
                BASE_URL,
                params={**params, "key": self.key_manager.get_key()},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise YoutubeAPIError(f"Network error: {e}") from e

        if resp.status_code == 403 and _error_reasons(resp) & QUOTA_REASONS:
            raise QuotaExceededError("Quota exceeded for the active API key")

        if resp.status_code != 200:
            raise YoutubeAPIError(f"Unexpected status {resp.status_code}: {resp.text[:200]}")

        try:
            return resp.json()
        except ValueError as e:
            raise YoutubeAPIError(f"Malformed response body: {e}") from e

    def fetch_since(self, query: str, published_after: datetime) -> list[YoutubeVideo]:
        """
        Returns videos matching `query` published at or after `published_after`,
        oldest first.

        On a quota error the client moves to the next key and repeats the same
        request, at most once per key in the pool.
        """
        params = {
            "part": "snippet",
            "type": "video",
            "q": query,
            "order": "date",
            "maxResults": self.max_results,
            "publishedAfter": format_rfc3339(published_after),
        }

        logger.info(f"🔎 Searching '{query}' published after {params['publishedAfter']}")

        attempts = len(self.key_manager)
        data = None
        for attempt in range(1, attempts + 1):
            try:
                data = self._search(params)
                break
            except QuotaExceededError:
                logger.warning(f"⚠️  Quota exceeded on key #{self.key_manager.current_index} ({attempt}/{attempts})")
                self._rotate()

        if data is None:
            raise AllKeysExhaustedError(f"All {attempts} API keys are out of quota")

        items = data.get("items")
        if not isinstance(items, list):
            raise YoutubeAPIError("Malformed response body: missing 'items' list")

        try:
            videos = transform_search_items(items)
        except (KeyError, TypeError, ValueError) as e:
            raise YoutubeAPIError(f"Malformed search item: {e}") from e

        logger.info(f"✅ Fetched {len(videos)} videos for '{query}'")
        return videos

    def close(self):
        """Releases pooled connections; called when the fetcher stops."""
        self._session.close()
