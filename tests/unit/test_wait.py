"""Tests for the WaitCoordinator.

Covers:
- Zero budget returns the submission record without polling
- Terminal records end the wait immediately
- Poll / sleep counts for a bounded wait with the default 5 s interval
- Timeout carries the last non-terminal record
- Cancellation before the first poll and during a sleep
- The default sleep checks for cancellation between short slices
- Remote errors from a poll propagate unchanged
"""

from __future__ import annotations

import threading
from unittest.mock import patch

import pytest

from sf_package1.core.exceptions import (
    OperationCancelledError,
    OperationTimeoutError,
    RemoteError,
)
from sf_package1.models.upload import UploadRequest, UploadRequestParams, UploadStatus
from sf_package1.operations.submit_upload import submit_upload
from sf_package1.operations.wait import CANCEL_CHECK_SECONDS, WaitCoordinator
from tests.fakes import PACKAGE_ID, FakePackagingApi, remote_outage, upload_record


class RecordingSleep:
    """``sleep`` double that records every requested interval."""

    def __init__(self, on_call: int | None = None, event: threading.Event | None = None) -> None:
        self.calls: list[float] = []
        self._on_call = on_call
        self._event = event

    def __call__(self, seconds: float) -> bool:
        self.calls.append(seconds)
        if self._event is not None and len(self.calls) == self._on_call:
            self._event.set()
            return True
        return False


class FakeClock:
    """Stand-in for the ``time`` module: sleeping advances a virtual clock."""

    def __init__(
        self, set_on_sleep: int | None = None, event: threading.Event | None = None
    ) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []
        self._set_on_sleep = set_on_sleep
        self._event = event

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        if self._event is not None and len(self.sleeps) == self._set_on_sleep:
            self._event.set()


def _submit(api: FakePackagingApi) -> UploadRequest:
    return submit_upload(api, UploadRequestParams(package_id=PACKAGE_ID, name="Spring")).record


class TestWaitBudget:
    def test_zero_budget_makes_no_poll(self) -> None:
        api = FakePackagingApi(status_script=["SUCCESS"])
        sleep = RecordingSleep()
        coordinator = WaitCoordinator(api, sleep=sleep)
        initial = _submit(api)

        result = coordinator.wait_for(initial, 0)

        assert result is initial
        assert result.status is UploadStatus.QUEUED
        assert coordinator.poll_count == 0
        assert api.get_calls == 0
        assert sleep.calls == []

    def test_terminal_initial_record_returned(self) -> None:
        api = FakePackagingApi()
        initial = UploadRequest.from_record(upload_record(status="SUCCESS"))
        coordinator = WaitCoordinator(api, sleep=RecordingSleep())

        assert coordinator.wait_for(initial, 5) is initial
        assert api.get_calls == 0

    def test_polls_until_success(self) -> None:
        api = FakePackagingApi(status_script=["IN_PROGRESS", "IN_PROGRESS", "SUCCESS"])
        sleep = RecordingSleep()
        coordinator = WaitCoordinator(api, sleep=sleep)

        result = coordinator.wait_for(_submit(api), 5)

        assert result.status is UploadStatus.SUCCESS
        assert coordinator.poll_count == 3
        assert sleep.calls == [5.0, 5.0]

    def test_error_is_terminal(self) -> None:
        api = FakePackagingApi(status_script=["IN_PROGRESS", "ERROR"])
        result = WaitCoordinator(api, sleep=RecordingSleep()).wait_for(_submit(api), 5)
        assert result.status is UploadStatus.ERROR
        assert result.errors == ("Apex tests failed",)

    def test_timeout_carries_last_record(self) -> None:
        api = FakePackagingApi(status_script=["IN_PROGRESS"])
        sleep = RecordingSleep()
        coordinator = WaitCoordinator(api, sleep=sleep)
        initial = _submit(api)

        with pytest.raises(OperationTimeoutError) as exc_info:
            coordinator.wait_for(initial, 1)

        err = exc_info.value
        assert err.request_id == initial.id
        assert err.last_record.status is UploadStatus.IN_PROGRESS
        assert err.code == "WAIT_TIMEOUT"
        assert "still in progress" in err.message
        # 60 s budget at 5 s per interval.
        assert coordinator.poll_count == 13
        assert len(sleep.calls) == 12

    def test_custom_interval(self) -> None:
        api = FakePackagingApi(status_script=["QUEUED"])
        sleep = RecordingSleep()
        coordinator = WaitCoordinator(api, poll_interval_seconds=30, sleep=sleep)

        with pytest.raises(OperationTimeoutError):
            coordinator.wait_for(_submit(api), 1)
        assert sleep.calls == [30, 30]
        assert coordinator.poll_count == 3

    @pytest.mark.parametrize("interval", [0, -1])
    def test_interval_must_be_positive(self, interval: float) -> None:
        with pytest.raises(ValueError, match="poll_interval_seconds"):
            WaitCoordinator(FakePackagingApi(), poll_interval_seconds=interval)


class TestWaitCancellation:
    def test_cancel_before_first_poll(self) -> None:
        api = FakePackagingApi(status_script=["SUCCESS"])
        coordinator = WaitCoordinator(api, sleep=RecordingSleep())
        coordinator.cancel()

        with pytest.raises(OperationCancelledError) as exc_info:
            coordinator.wait_for(_submit(api), 5)

        assert api.get_calls == 0
        assert exc_info.value.last_record.status is UploadStatus.QUEUED

    def test_cancel_during_sleep(self) -> None:
        api = FakePackagingApi(status_script=["IN_PROGRESS", "IN_PROGRESS", "SUCCESS"])
        event = threading.Event()
        sleep = RecordingSleep(on_call=1, event=event)
        coordinator = WaitCoordinator(api, cancel_event=event, sleep=sleep)

        with pytest.raises(OperationCancelledError) as exc_info:
            coordinator.wait_for(_submit(api), 5)

        assert coordinator.poll_count == 1
        assert exc_info.value.code == "WAIT_CANCELLED"
        assert exc_info.value.last_record.status is UploadStatus.IN_PROGRESS

    def test_default_sleep_wakes_on_event(self) -> None:
        api = FakePackagingApi(status_script=["IN_PROGRESS"])
        event = threading.Event()
        coordinator = WaitCoordinator(api, poll_interval_seconds=60, cancel_event=event)
        timer = threading.Timer(0.05, event.set)
        timer.start()
        try:
            with pytest.raises(OperationCancelledError):
                coordinator.wait_for(_submit(api), 10)
        finally:
            timer.cancel()
        assert coordinator.cancel_event is event

    def test_default_sleep_runs_in_slices(self) -> None:
        clock = FakeClock()
        api = FakePackagingApi(status_script=["IN_PROGRESS", "SUCCESS"])
        coordinator = WaitCoordinator(api, poll_interval_seconds=0.3125)

        with patch("sf_package1.operations.wait.time", clock), patch(
            "sf_package1.operations.wait.CANCEL_CHECK_SECONDS", 0.125
        ):
            result = coordinator.wait_for(_submit(api), 5)

        assert result.status is UploadStatus.SUCCESS
        assert clock.sleeps == [0.125, 0.125, 0.0625]
        assert coordinator.poll_count == 2

    def test_event_set_between_slices_stops_wait(self) -> None:
        event = threading.Event()
        clock = FakeClock(set_on_sleep=2, event=event)
        api = FakePackagingApi(status_script=["IN_PROGRESS"])
        coordinator = WaitCoordinator(api, poll_interval_seconds=60, cancel_event=event)

        with patch("sf_package1.operations.wait.time", clock), pytest.raises(
            OperationCancelledError
        ):
            coordinator.wait_for(_submit(api), 10)

        assert clock.sleeps == [CANCEL_CHECK_SECONDS, CANCEL_CHECK_SECONDS]
        assert coordinator.poll_count == 1


class TestWaitErrors:
    def test_remote_error_propagates(self) -> None:
        api = FakePackagingApi(poll_error=remote_outage())
        coordinator = WaitCoordinator(api, sleep=RecordingSleep())

        with pytest.raises(RemoteError) as exc_info:
            coordinator.wait_for(_submit(api), 5)
        assert exc_info.value.status_code == 503
        assert api.get_calls == 1
