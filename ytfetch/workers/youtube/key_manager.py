"""
ytfetch/workers/youtube/key_manager.py

Holds the pool of YouTube Data API v3 keys and the index of the one in use.
The search client rotates to the next key when the active one hits its quota.

SETUP in .env:
    YOUTUBE_API_KEYS=AIzaSy...,AIzaSy...
  or
    YOUTUBE_API_KEY_1=AIzaSy...
    YOUTUBE_API_KEY_2=AIzaSy...
"""

import logging
import threading


logger = logging.getLogger(__name__)


class NoAPIKeysError(EnvironmentError):
    """Raised when the key pool is built with no keys at all."""


class APIKeyManager:
    """
    Thread-safe YouTube API key pool with:
    - A single active key shared by every caller
    - Round-robin rotation (wrapping) on quota exhaustion
    - Per-key usage tracking
    """

    def __init__(self, keys: list[str]):
        keys = [k.strip() for k in keys or [] if k and k.strip()]
        if not keys:
            raise NoAPIKeysError(
                "❌ No YouTube API keys found! "
                "Set YOUTUBE_API_KEYS or YOUTUBE_API_KEY_1 ... YOUTUBE_API_KEY_N in your .env"
            )

        self._lock = threading.Lock()
        self._keys = keys
        self._usage: dict[int, int] = {i: 0 for i in range(len(keys))}
        self._current_index = 0

        logger.info(f"🔑 APIKeyManager initialized with {len(self._keys)} keys")

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._current_index

    def get_key(self) -> str:
        """Returns the active key and counts one request against it."""
        with self._lock:
            self._usage[self._current_index] += 1
            return self._keys[self._current_index]

    def rotate(self) -> str:
        """
        Advances to the next key in the pool, wrapping around at the end.
        The new index is kept for every later call.
        """
        with self._lock:
            self._current_index = (self._current_index + 1) % len(self._keys)
            index = self._current_index
            key = self._keys[index]

        logger.warning(f"🔄 Rotated to API key #{index} (...{key[-4:]})")
        return key

    def status(self) -> dict:
        """Returns a snapshot of current pool state."""
        with self._lock:
            return {
                "total_keys": len(self._keys),
                "current_index": self._current_index,
                "usage_per_key": dict(self._usage),
            }
