"""Typed models for package upload requests.

Defines the data structures exchanged between the commands, the
submit/poll/wait engine and the API adapter:

- ``UploadStatus``: Lifecycle state of a ``PackageUploadRequest``
- ``OperationHandle``: Opaque id issued when an upload is submitted
- ``UploadRequest``: Full state of an upload request, fetched per poll
- ``UploadResult``: The ids an upload produces once it succeeds
- ``UploadRequestParams``: Parameters for submitting a new upload

Design notes:
- All models are frozen dataclasses.
- Remote records are mapped field by field in ``from_record`` /
  ``to_record``; there is no dynamic attribute spreading.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sf_package1.core.constants import PACKAGE_UPLOAD_REQUEST
from sf_package1.core.exceptions import ContractError, ValidationError

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ModelValidationError(ValidationError):
    """Raised when a model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        super().__init__(f"{model}.{field_name}={value!r}: {message}")


class RecordContractError(ContractError):
    """Raised when a remote record cannot be mapped onto a model."""

    default_stage = "record_mapping"
    default_code = "RECORD_CONTRACT_VIOLATION"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class UploadStatus(enum.Enum):
    """Lifecycle state of a package upload request.

    Values:
        QUEUED:      Accepted, waiting for a worker.
        IN_PROGRESS: Upload running.
        SUCCESS:     Package version created.
        ERROR:       Upload failed; ``errors`` explains why.
    """

    QUEUED = "QUEUED"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions can occur."""
        return self in (UploadStatus.SUCCESS, UploadStatus.ERROR)

    @property
    def is_failure(self) -> bool:
        return self is UploadStatus.ERROR

    @property
    def display(self) -> str:
        """Sentence-case label, e.g. ``IN_PROGRESS`` → ``In Progress``."""
        return " ".join(part.capitalize() for part in self.value.split("_"))


# ---------------------------------------------------------------------------
# Operation models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OperationHandle:
    """Identifies one submitted upload request.

    Attributes:
        id: Opaque ``0HD`` id issued by the remote system.
        submitted_at: When the submission was accepted.
    """

    id: str
    submitted_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        _check_non_empty("OperationHandle", "id", self.id)


@dataclass(frozen=True, slots=True)
class UploadResult:
    """Identifiers produced by a successful upload.

    Attributes:
        metadata_package_id: The ``033`` package id.
        metadata_package_version_id: The ``04t`` subscriber package version id.
    """

    metadata_package_id: str
    metadata_package_version_id: str


@dataclass(frozen=True, slots=True)
class UploadRequest:
    """Full state of a ``PackageUploadRequest``.

    ``errors`` is non-empty exactly when ``status`` is ``ERROR``.  The
    remote system fills ``metadata_package_version_id`` as soon as the
    request is queued, so the raw field may be set on any status;
    ``result`` only exposes it once the status is ``SUCCESS``.
    """

    id: str
    status: UploadStatus
    errors: tuple[str, ...] = ()
    metadata_package_id: str = ""
    metadata_package_version_id: str = ""
    version_name: str = ""
    description: str | None = None
    major_version: int | None = None
    minor_version: int | None = None
    is_release_version: bool = False
    release_notes_url: str | None = None
    post_install_url: str | None = None
    password: str | None = None
    is_deleted: bool = False
    created_date: str | None = None
    created_by_id: str | None = None
    last_modified_date: str | None = None
    last_modified_by_id: str | None = None
    system_modstamp: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_non_empty("UploadRequest", "id", self.id)
        if self.status.is_failure and not self.errors:
            raise ModelValidationError(
                "UploadRequest", "errors", self.errors, "must not be empty when status is ERROR"
            )
        if not self.status.is_failure and self.errors:
            raise ModelValidationError(
                "UploadRequest",
                "errors",
                self.errors,
                f"must be empty when status is {self.status.value}",
            )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def result(self) -> UploadResult | None:
        """The produced ids when ``SUCCESS``, otherwise ``None``."""
        if self.status is not UploadStatus.SUCCESS:
            return None
        return UploadResult(
            metadata_package_id=self.metadata_package_id,
            metadata_package_version_id=self.metadata_package_version_id,
        )

    @property
    def version_number(self) -> str:
        """``major.minor`` when both parts are known, otherwise ``""``."""
        if self.major_version is None or self.minor_version is None:
            return ""
        return f"{self.major_version}.{self.minor_version}"

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> UploadRequest:
        """Map a ``PackageUploadRequest`` SObject onto an ``UploadRequest``.

        Raises:
            RecordContractError: If ``Id`` or ``Status`` is missing or the
                status is not a known value.
        """
        record_id = record.get("Id")
        if not record_id:
            msg = f"{PACKAGE_UPLOAD_REQUEST} record has no Id"
            raise RecordContractError(msg)

        raw_status = record.get("Status")
        try:
            status = UploadStatus(raw_status)
        except ValueError as exc:
            msg = f"{PACKAGE_UPLOAD_REQUEST} {record_id} has unknown Status {raw_status!r}"
            raise RecordContractError(msg, correlation_id=str(record_id)) from exc

        errors = _parse_errors(record.get("Errors"))
        if status.is_failure and not errors:
            errors = ("Package upload failed without an error message",)
        if not status.is_failure:
            errors = ()

        return cls(
            id=str(record_id),
            status=status,
            errors=errors,
            metadata_package_id=str(record.get("MetadataPackageId") or ""),
            metadata_package_version_id=str(record.get("MetadataPackageVersionId") or ""),
            version_name=str(record.get("VersionName") or ""),
            description=record.get("Description"),
            major_version=_optional_int(record.get("MajorVersion")),
            minor_version=_optional_int(record.get("MinorVersion")),
            is_release_version=bool(record.get("IsReleaseVersion", False)),
            release_notes_url=record.get("ReleaseNotesUrl"),
            post_install_url=record.get("PostInstallUrl"),
            password=record.get("Password"),
            is_deleted=bool(record.get("IsDeleted", False)),
            created_date=record.get("CreatedDate"),
            created_by_id=record.get("CreatedById"),
            last_modified_date=record.get("LastModifiedDate"),
            last_modified_by_id=record.get("LastModifiedById"),
            system_modstamp=record.get("SystemModstamp"),
            attributes={str(k): str(v) for k, v in (record.get("attributes") or {}).items()},
        )


# ---------------------------------------------------------------------------
# Submission parameters
# ---------------------------------------------------------------------------

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)$")


@dataclass(frozen=True, slots=True)
class UploadRequestParams:
    """Parameters for a new package version upload.

    Attributes:
        package_id: ``033`` id of the metadata package to upload.
        name: Version name.
        description: Optional version description.
        version: Optional ``"major.minor"`` version number.
        managed_released: Upload as a released (not beta) version.
        release_notes_url: Optional release notes link.
        post_install_url: Optional post-install instructions link.
        installation_key: Optional installation password.
    """

    package_id: str
    name: str
    description: str | None = None
    version: str | None = None
    managed_released: bool = False
    release_notes_url: str | None = None
    post_install_url: str | None = None
    installation_key: str | None = None

    def __post_init__(self) -> None:
        _check_non_empty("UploadRequestParams", "package_id", self.package_id)
        if not self.package_id.startswith("033"):
            raise ModelValidationError(
                "UploadRequestParams", "package_id", self.package_id, "must start with '033'"
            )
        _check_non_empty("UploadRequestParams", "name", self.name)
        if self.version is not None and not _VERSION_RE.match(self.version):
            raise ModelValidationError(
                "UploadRequestParams", "version", self.version, "must look like 'major.minor'"
            )

    def to_record(self) -> dict[str, Any]:
        """Return the ``PackageUploadRequest`` create body."""
        record: dict[str, Any] = {
            "MetadataPackageId": self.package_id,
            "VersionName": self.name,
            "IsReleaseVersion": self.managed_released,
        }
        if self.description is not None:
            record["Description"] = self.description
        if self.version is not None:
            major, minor = self.version.split(".")
            record["MajorVersion"] = int(major)
            record["MinorVersion"] = int(minor)
        if self.release_notes_url is not None:
            record["ReleaseNotesUrl"] = self.release_notes_url
        if self.post_install_url is not None:
            record["PostInstallUrl"] = self.post_install_url
        if self.installation_key is not None:
            record["Password"] = self.installation_key
        return record


# ---------------------------------------------------------------------------
# Helpers (module-private)
# ---------------------------------------------------------------------------


def _parse_errors(raw: object) -> tuple[str, ...]:
    """Flatten the ``Errors`` field into an ordered tuple of messages.

    The API returns ``{"errors": [{"message": ...}, ...]}``; plain lists
    of strings or dicts are accepted too.
    """
    if not raw:
        return ()
    items = raw.get("errors", []) if isinstance(raw, dict) else raw
    if isinstance(items, str):
        return (items,)
    messages: list[str] = []
    for item in items if isinstance(items, list) else []:
        if isinstance(item, dict):
            message = str(item.get("message", "")).strip()
        else:
            message = str(item).strip()
        if message:
            messages.append(message)
    return tuple(messages)


def _optional_int(value: object) -> int | None:
    if value is None or value == "":
        return None
    return int(value)  # type: ignore[call-overload]


def _check_non_empty(model: str, field_name: str, value: str) -> None:
    """Raise `ModelValidationError` if *value* is empty or blank."""
    if not value or not value.strip():
        raise ModelValidationError(model, field_name, value, "must not be empty")
