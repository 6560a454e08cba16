"""Wait coordinator — block until an upload request settles.

Drives ``poll_upload`` in a bounded loop:

1. A wait budget of zero (or less) means fire-and-forget: the record
   from the submission is returned and no poll is made.
2. Otherwise poll; a terminal record (``SUCCESS`` / ``ERROR``) is
   returned immediately.
3. A non-terminal record with no budget left raises
   ``OperationTimeoutError`` carrying that record.
4. Otherwise sleep one interval, deduct it from the budget, and poll
   again.

Cancellation is checked before every sleep and every poll.  The default
sleep runs in short slices and reads the cancellation event between
them, so a set event ends the wait within one slice.  It never blocks
inside ``Event.wait``, which keeps ``Event.set`` safe to call from a
SIGINT handler on the waiting thread.
A cancelled wait raises ``OperationCancelledError`` and leaves the
remote upload running.

Remote errors from a poll are not retried here; they propagate.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

from sf_package1.core.constants import DEFAULT_POLL_INTERVAL_SECONDS
from sf_package1.core.exceptions import OperationCancelledError, OperationTimeoutError
from sf_package1.operations.poll_upload import poll_upload

if TYPE_CHECKING:
    from collections.abc import Callable

    from sf_package1.api.base import PackagingApi
    from sf_package1.models.upload import UploadRequest

#: Longest single sleep between two cancellation checks.
CANCEL_CHECK_SECONDS = 0.1


class WaitCoordinator:
    """Poll one upload request until it settles or the budget runs out.

    Args:
        api: Packaging API adapter used for each poll.
        poll_interval_seconds: Seconds to sleep between polls.
        cancel_event: Event that aborts the wait when set.  A private
            event is created when omitted.
        sleep: Optional ``sleep(seconds) -> cancelled`` override.  The
            default sleeps in slices of ``CANCEL_CHECK_SECONDS`` and
            returns early once *cancel_event* is set.
    """

    def __init__(
        self,
        api: PackagingApi,
        *,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        cancel_event: threading.Event | None = None,
        sleep: Callable[[float], bool] | None = None,
    ) -> None:
        if poll_interval_seconds <= 0:
            msg = f"poll_interval_seconds must be > 0, got {poll_interval_seconds!r}"
            raise ValueError(msg)
        self._api = api
        self._interval = poll_interval_seconds
        self._cancel = cancel_event or threading.Event()
        self._sleep = sleep or self._sliced_sleep
        self.poll_count = 0

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel

    def cancel(self) -> None:
        """Request the running wait to stop at its next check."""
        self._cancel.set()

    def wait_for(self, initial: UploadRequest, max_wait_minutes: float) -> UploadRequest:
        """Wait for *initial*'s upload request to reach a terminal status.

        Args:
            initial: The record returned at submission time.
            max_wait_minutes: Wait budget; ``<= 0`` disables waiting.

        Returns:
            The terminal record, or *initial* when not waiting.

        Raises:
            OperationTimeoutError: Budget exhausted while still running.
            OperationCancelledError: The cancellation event was set.
            NotFoundError, RemoteError: From an individual poll.
        """
        self.poll_count = 0
        if max_wait_minutes <= 0 or initial.is_terminal:
            return initial

        request_id = initial.id
        remaining = max_wait_minutes * 60.0
        record = initial

        while True:
            self._check_cancelled(record)
            record = poll_upload(self._api, request_id)
            self.poll_count += 1
            if record.is_terminal:
                return record

            if remaining <= 0:
                msg = (
                    f"Upload request {request_id} is still {record.status.display.lower()} "
                    f"after waiting {max_wait_minutes:g} minute(s)"
                )
                raise OperationTimeoutError(msg, request_id=request_id, last_record=record)

            self._check_cancelled(record)
            if self._sleep(self._interval):
                self._raise_cancelled(record)
            remaining -= self._interval

    def _sliced_sleep(self, seconds: float) -> bool:
        """Sleep up to *seconds*; return ``True`` if cancelled meanwhile."""
        deadline = time.monotonic() + seconds
        while not self._cancel.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            time.sleep(min(CANCEL_CHECK_SECONDS, remaining))
        return True

    def _check_cancelled(self, record: UploadRequest) -> None:
        if self._cancel.is_set():
            self._raise_cancelled(record)

    @staticmethod
    def _raise_cancelled(record: UploadRequest) -> None:
        msg = f"Stopped waiting for upload request {record.id}; it is still running remotely"
        raise OperationCancelledError(msg, request_id=record.id, last_record=record)
