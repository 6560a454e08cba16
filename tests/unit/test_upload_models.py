"""Tests for the upload request models.

Covers:
- ``UploadStatus`` terminal / failure classification and display labels
- ``UploadRequest.from_record`` field mapping and error normalisation
- The errors-iff-ERROR invariant and the ``result`` accessor
- ``UploadRequestParams`` validation and create-body mapping
"""

from __future__ import annotations

import pytest

from sf_package1.core.exceptions import ContractError, ValidationError
from sf_package1.models.upload import (
    ModelValidationError,
    OperationHandle,
    RecordContractError,
    UploadRequest,
    UploadRequestParams,
    UploadStatus,
)
from tests.fakes import PACKAGE_ID, REQUEST_ID, USER_ID, VERSION_ID, upload_record


class TestUploadStatus:
    @pytest.mark.parametrize(
        ("status", "terminal"),
        [
            (UploadStatus.QUEUED, False),
            (UploadStatus.IN_PROGRESS, False),
            (UploadStatus.SUCCESS, True),
            (UploadStatus.ERROR, True),
        ],
    )
    def test_is_terminal(self, status: UploadStatus, terminal: bool) -> None:
        assert status.is_terminal is terminal

    def test_only_error_is_failure(self) -> None:
        assert [s for s in UploadStatus if s.is_failure] == [UploadStatus.ERROR]

    def test_display_is_sentence_case(self) -> None:
        assert UploadStatus.IN_PROGRESS.display == "In Progress"
        assert UploadStatus.SUCCESS.display == "Success"
        assert UploadStatus.QUEUED.display == "Queued"


class TestOperationHandle:
    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ModelValidationError):
            OperationHandle(id="  ")

    def test_submitted_at_defaults_to_now(self) -> None:
        handle = OperationHandle(id=REQUEST_ID)
        assert handle.submitted_at.tzinfo is not None


class TestUploadRequestFromRecord:
    def test_maps_every_field(self) -> None:
        record = UploadRequest.from_record(
            upload_record(status="SUCCESS", Description="First cut", Password="s3cret")
        )
        assert record.id == REQUEST_ID
        assert record.status is UploadStatus.SUCCESS
        assert record.errors == ()
        assert record.metadata_package_id == PACKAGE_ID
        assert record.metadata_package_version_id == VERSION_ID
        assert record.version_name == "1gpPackageNUT"
        assert record.description == "First cut"
        assert record.major_version == 1
        assert record.minor_version == 4
        assert record.version_number == "1.4"
        assert record.password == "s3cret"
        assert record.created_by_id == USER_ID
        assert record.attributes["type"] == "PackageUploadRequest"

    def test_error_messages_flattened_in_order(self) -> None:
        raw = upload_record(
            status="ERROR",
            Errors={"errors": [{"message": "first"}, {"message": "second"}]},
        )
        assert UploadRequest.from_record(raw).errors == ("first", "second")

    def test_error_list_of_strings_accepted(self) -> None:
        raw = upload_record(status="ERROR", Errors=["only one"])
        assert UploadRequest.from_record(raw).errors == ("only one",)

    def test_error_without_messages_gets_default(self) -> None:
        raw = upload_record(status="ERROR", Errors=None)
        record = UploadRequest.from_record(raw)
        assert record.errors == ("Package upload failed without an error message",)

    def test_errors_dropped_when_not_error(self) -> None:
        raw = upload_record(status="IN_PROGRESS", Errors={"errors": [{"message": "stale"}]})
        assert UploadRequest.from_record(raw).errors == ()

    def test_missing_id_is_contract_error(self) -> None:
        raw = upload_record()
        del raw["Id"]
        with pytest.raises(RecordContractError) as exc_info:
            UploadRequest.from_record(raw)
        assert isinstance(exc_info.value, ContractError)

    def test_unknown_status_is_contract_error(self) -> None:
        with pytest.raises(RecordContractError, match="COMPLETE"):
            UploadRequest.from_record(upload_record(status="COMPLETE"))

    def test_missing_version_parts_give_empty_version_number(self) -> None:
        raw = upload_record(MajorVersion=None, MinorVersion=None)
        assert UploadRequest.from_record(raw).version_number == ""


class TestUploadRequestInvariants:
    def test_error_status_requires_errors(self) -> None:
        with pytest.raises(ModelValidationError, match="must not be empty"):
            UploadRequest(id=REQUEST_ID, status=UploadStatus.ERROR)

    def test_non_error_status_rejects_errors(self) -> None:
        with pytest.raises(ModelValidationError, match="must be empty"):
            UploadRequest(id=REQUEST_ID, status=UploadStatus.SUCCESS, errors=("x",))

    def test_result_only_on_success(self) -> None:
        queued = UploadRequest.from_record(upload_record(status="QUEUED"))
        done = UploadRequest.from_record(upload_record(status="SUCCESS"))
        assert queued.result is None
        assert done.result is not None
        assert done.result.metadata_package_version_id == VERSION_ID
        assert done.result.metadata_package_id == PACKAGE_ID

    def test_is_frozen(self) -> None:
        record = UploadRequest.from_record(upload_record())
        with pytest.raises(AttributeError):
            record.status = UploadStatus.SUCCESS  # type: ignore[misc]


class TestUploadRequestParams:
    def test_minimal_record(self) -> None:
        params = UploadRequestParams(package_id=PACKAGE_ID, name="Spring")
        assert params.to_record() == {
            "MetadataPackageId": PACKAGE_ID,
            "VersionName": "Spring",
            "IsReleaseVersion": False,
        }

    def test_full_record(self) -> None:
        params = UploadRequestParams(
            package_id=PACKAGE_ID,
            name="Spring",
            description="desc",
            version="3.2",
            managed_released=True,
            release_notes_url="https://example.com/notes",
            post_install_url="https://example.com/post",
            installation_key="key",
        )
        record = params.to_record()
        assert record["MajorVersion"] == 3
        assert record["MinorVersion"] == 2
        assert record["IsReleaseVersion"] is True
        assert record["Description"] == "desc"
        assert record["ReleaseNotesUrl"] == "https://example.com/notes"
        assert record["PostInstallUrl"] == "https://example.com/post"
        assert record["Password"] == "key"

    def test_package_id_must_be_033(self) -> None:
        with pytest.raises(ModelValidationError, match="033"):
            UploadRequestParams(package_id="04txx0000000001AAA", name="x")

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            UploadRequestParams(package_id=PACKAGE_ID, name="")

    @pytest.mark.parametrize("version", ["1", "1.2.3", "a.b", ""])
    def test_bad_version_rejected(self, version: str) -> None:
        with pytest.raises(ModelValidationError, match="major.minor"):
            UploadRequestParams(package_id=PACKAGE_ID, name="x", version=version)
