"""Tests for the submit_upload and poll_upload operations.

Verifies single-call submission and status checks against a scripted
in-memory API and mocked adapters.
"""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock

from sf_package1.core.exceptions import NotFoundError, RemoteError, ValidationError
from sf_package1.models.upload import RecordContractError, UploadRequestParams, UploadStatus
from sf_package1.operations.poll_upload import poll_upload
from sf_package1.operations.submit_upload import submit_upload
from tests.fakes import PACKAGE_ID, FakePackagingApi, remote_outage, upload_record


def _params() -> UploadRequestParams:
    return UploadRequestParams(package_id=PACKAGE_ID, name="Spring", version="1.4")


class TestSubmitUpload(unittest.TestCase):
    def test_returns_handle_and_initial_record(self) -> None:
        api = FakePackagingApi()
        submission = submit_upload(api, _params())

        self.assertTrue(submission.handle.id.startswith("0HD"))
        self.assertEqual(submission.record.id, submission.handle.id)
        self.assertEqual(submission.record.status, UploadStatus.QUEUED)
        self.assertEqual(submission.record.version_name, "Spring")

    def test_issues_exactly_one_create(self) -> None:
        api = MagicMock()
        api.create_upload_request.return_value = upload_record()
        submit_upload(api, _params())

        api.create_upload_request.assert_called_once_with(_params().to_record())
        api.get_upload_request.assert_not_called()

    def test_each_submit_is_a_new_request(self) -> None:
        api = FakePackagingApi()
        first = submit_upload(api, _params())
        second = submit_upload(api, _params())
        self.assertNotEqual(first.handle.id, second.handle.id)
        self.assertEqual(api.create_calls, 2)

    def test_remote_rejection_propagates(self) -> None:
        api = FakePackagingApi(
            create_error=RemoteError("No such package", status_code=400, error_code="INVALID_ID")
        )
        with self.assertRaises(RemoteError) as ctx:
            submit_upload(api, _params())
        self.assertFalse(ctx.exception.retryable)

    def test_unmappable_record(self) -> None:
        api = MagicMock()
        api.create_upload_request.return_value = {"Status": "QUEUED"}
        with self.assertRaises(RecordContractError):
            submit_upload(api, _params())


class TestPollUpload(unittest.TestCase):
    def test_poll_right_after_submit_finds_request(self) -> None:
        for script in (["QUEUED"], ["IN_PROGRESS"], ["SUCCESS"]):
            api = FakePackagingApi(status_script=script)
            handle = submit_upload(api, _params()).handle
            record = poll_upload(api, handle.id)
            self.assertEqual(record.id, handle.id)
            self.assertNotEqual(record.status, UploadStatus.ERROR)

    def test_advances_through_script(self) -> None:
        api = FakePackagingApi(status_script=["IN_PROGRESS", "SUCCESS"])
        request_id = submit_upload(api, _params()).handle.id

        self.assertEqual(poll_upload(api, request_id).status, UploadStatus.IN_PROGRESS)
        self.assertEqual(poll_upload(api, request_id).status, UploadStatus.SUCCESS)

    def test_terminal_record_is_stable(self) -> None:
        api = FakePackagingApi(status_script=["ERROR", "SUCCESS"])
        request_id = submit_upload(api, _params()).handle.id

        first = poll_upload(api, request_id)
        second = poll_upload(api, request_id)
        self.assertEqual(first.status, UploadStatus.ERROR)
        self.assertEqual(second, first)

    def test_error_record_carries_messages(self) -> None:
        api = FakePackagingApi(status_script=["ERROR"])
        request_id = submit_upload(api, _params()).handle.id
        self.assertEqual(poll_upload(api, request_id).errors, ("Apex tests failed",))

    def test_strips_request_id(self) -> None:
        api = MagicMock()
        api.get_upload_request.return_value = upload_record()
        poll_upload(api, "  0HDxx0000000001AAA ")
        api.get_upload_request.assert_called_once_with("0HDxx0000000001AAA")

    def test_empty_request_id(self) -> None:
        api = MagicMock()
        with self.assertRaises(ValidationError) as ctx:
            poll_upload(api, " ")
        self.assertEqual(ctx.exception.stage, "poll")
        api.get_upload_request.assert_not_called()

    def test_unknown_request_id(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            poll_upload(FakePackagingApi(), "0HDxx0000000099AAA")
        self.assertEqual(ctx.exception.record_id, "0HDxx0000000099AAA")

    def test_remote_failure_propagates(self) -> None:
        api = FakePackagingApi(poll_error=remote_outage())
        with self.assertRaises(RemoteError) as ctx:
            poll_upload(api, "0HDxx0000000001AAA")
        self.assertTrue(ctx.exception.retryable)
