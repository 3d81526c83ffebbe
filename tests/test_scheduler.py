import threading
from unittest.mock import MagicMock

import pytest
from apscheduler.schedulers import SchedulerNotRunningError

from ytfetch.scheduler import JOB_ID, FetchCoordinator
from ytfetch.workers.youtube.key_manager import NoAPIKeysError


class TestFetchCoordinator:
    def test_starts_stopped(self):
        coordinator = FetchCoordinator(cycle=lambda: 0, interval_seconds=3600)
        assert coordinator.running is False

    def test_start_and_stop(self):
        coordinator = FetchCoordinator(cycle=lambda: 0, interval_seconds=3600)

        coordinator.start()
        try:
            assert coordinator.running is True
            job = coordinator._scheduler.get_job(JOB_ID)
            assert job is not None
            assert job.max_instances == 1
        finally:
            coordinator.stop()

        assert coordinator.running is False

    def test_start_twice_keeps_one_job(self):
        coordinator = FetchCoordinator(cycle=lambda: 0, interval_seconds=3600)
        coordinator.start()
        coordinator.start()
        try:
            assert len(coordinator._scheduler.get_jobs()) == 1
        finally:
            coordinator.stop()

    def test_double_stop_is_a_caller_error(self):
        coordinator = FetchCoordinator(cycle=lambda: 0, interval_seconds=3600)
        coordinator.start()
        coordinator.stop()

        with pytest.raises(SchedulerNotRunningError):
            coordinator.stop()

    def test_run_once_returns_stored_count(self):
        coordinator = FetchCoordinator(cycle=lambda: 3, interval_seconds=3600)
        assert coordinator.run_once() == 3
        assert coordinator.last_error is None

    def test_failed_cycle_is_swallowed_and_next_one_runs(self):
        calls = []

        def cycle():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("upstream down")
            return 2

        coordinator = FetchCoordinator(cycle=cycle, interval_seconds=3600)

        assert coordinator.run_once() is None
        assert isinstance(coordinator.last_error, RuntimeError)
        assert coordinator.run_once() == 2
        assert coordinator.last_error is None

    def test_overlapping_cycle_is_skipped(self):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow_cycle():
            calls.append(1)
            started.set()
            release.wait(timeout=5)
            return 1

        coordinator = FetchCoordinator(cycle=slow_cycle, interval_seconds=3600)
        worker = threading.Thread(target=coordinator.run_once)
        worker.start()
        try:
            assert started.wait(timeout=5)
            assert coordinator.run_once() is None
            assert coordinator.last_error is None
        finally:
            release.set()
            worker.join(timeout=5)

        assert len(calls) == 1

    def test_missing_keys_abort_construction(self, monkeypatch):
        from ytfetch.core.config import settings

        monkeypatch.setattr(settings, "YOUTUBE_API_KEYS", [])
        with pytest.raises(NoAPIKeysError):
            FetchCoordinator()

    def test_interval_job_runs_the_cycle(self):
        ran = threading.Event()

        def cycle():
            ran.set()
            return 0

        coordinator = FetchCoordinator(cycle=cycle, interval_seconds=1)
        coordinator.start()
        try:
            assert ran.wait(timeout=5)
        finally:
            coordinator.stop()

    def test_stop_closes_the_search_client(self):
        client = MagicMock()
        coordinator = FetchCoordinator(interval_seconds=3600, client=client)
        coordinator.start()
        coordinator.stop()

        client.close.assert_called_once_with()

    def test_key_status_comes_from_the_client(self):
        client = MagicMock()
        client.key_manager.status.return_value = {"total_keys": 1, "current_index": 0, "usage_per_key": {0: 0}}

        coordinator = FetchCoordinator(interval_seconds=3600, client=client)

        assert coordinator.key_status()["total_keys"] == 1
        assert FetchCoordinator(cycle=lambda: 0, interval_seconds=3600).key_status() is None
