import pytest

from ytfetch.workers.youtube.key_manager import APIKeyManager, NoAPIKeysError


def test_empty_pool_is_fatal():
    with pytest.raises(NoAPIKeysError):
        APIKeyManager([])


def test_blank_keys_are_ignored():
    with pytest.raises(NoAPIKeysError):
        APIKeyManager(["", "   "])


def test_starts_on_first_key():
    manager = APIKeyManager(["key-a", "key-b"])
    assert manager.current_index == 0
    assert manager.get_key() == "key-a"


def test_rotate_wraps_around():
    manager = APIKeyManager(["key-a", "key-b", "key-c"])

    assert manager.rotate() == "key-b"
    assert manager.rotate() == "key-c"
    assert manager.rotate() == "key-a"
    assert manager.current_index == 0


def test_rotation_is_kept_for_later_calls():
    manager = APIKeyManager(["key-a", "key-b"])
    manager.rotate()

    assert manager.get_key() == "key-b"
    assert manager.get_key() == "key-b"


def test_status_tracks_usage():
    manager = APIKeyManager(["key-a", "key-b"])
    manager.get_key()
    manager.rotate()
    manager.get_key()
    manager.get_key()

    status = manager.status()
    assert status["total_keys"] == 2
    assert status["current_index"] == 1
    assert status["usage_per_key"] == {0: 1, 1: 2}
