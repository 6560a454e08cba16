"""Report formatter — map an upload request onto a displayable shape.

Two pure renderings of an ``UploadRequest``:

- ``ReportMode.HUMAN``   — ordered ``(label, value)`` rows for a
  key/value table.  Every label in ``REPORT_LABELS`` is always present;
  unset values render as ``""``.
- ``ReportMode.MACHINE`` — a dict keyed by the ``PackageUploadRequest``
  field names in ``MACHINE_FIELDS``.  Every key is always present;
  unset values are ``None``.

``status_lines`` produces the one-line summaries printed after a
``version create`` (uploaded / enqueued / still running).
"""

from __future__ import annotations

import enum
from typing import Any

from sf_package1.core.constants import INSTALL_URL_BASE, REPORT_COMMAND
from sf_package1.models.upload import UploadRequest, UploadStatus


class ReportMode(enum.Enum):
    HUMAN = "human"
    MACHINE = "machine"


REPORT_LABELS: tuple[str, ...] = (
    "Id",
    "Status",
    "Package Id",
    "Package Version Id",
    "Version Name",
    "Version Number",
    "Released",
    "Created Date",
    "Created By",
    "Install URL",
    "Errors",
)

MACHINE_FIELDS: tuple[str, ...] = (
    "attributes",
    "Id",
    "IsDeleted",
    "CreatedDate",
    "CreatedById",
    "LastModifiedDate",
    "LastModifiedById",
    "SystemModstamp",
    "MetadataPackageId",
    "MetadataPackageVersionId",
    "IsReleaseVersion",
    "VersionName",
    "Description",
    "MajorVersion",
    "MinorVersion",
    "ReleaseNotesUrl",
    "PostInstallUrl",
    "Password",
    "Status",
    "Errors",
)


def format_report(
    record: UploadRequest, mode: ReportMode
) -> list[tuple[str, str]] | dict[str, Any]:
    """Render *record* for *mode*.  See ``human_rows`` / ``machine_record``."""
    if mode is ReportMode.HUMAN:
        return human_rows(record)
    return machine_record(record)


def install_url(record: UploadRequest) -> str:
    """Subscriber install link for a successful upload, else ``""``."""
    result = record.result
    if result is None or not result.metadata_package_version_id:
        return ""
    return f"{INSTALL_URL_BASE}{result.metadata_package_version_id}"


def human_rows(record: UploadRequest) -> list[tuple[str, str]]:
    """Return the key/value rows of the ``version create get`` table."""
    values = {
        "Id": record.id,
        "Status": record.status.display,
        "Package Id": record.metadata_package_id,
        "Package Version Id": record.metadata_package_version_id,
        "Version Name": record.version_name,
        "Version Number": record.version_number,
        "Released": "Yes" if record.is_release_version else "No",
        "Created Date": record.created_date or "",
        "Created By": record.created_by_id or "",
        "Install URL": install_url(record),
        "Errors": "\n".join(record.errors),
    }
    return [(label, values[label]) for label in REPORT_LABELS]


def machine_record(record: UploadRequest) -> dict[str, Any]:
    """Return the ``PackageUploadRequest`` JSON shape with every field present."""
    errors = {"errors": [{"message": m} for m in record.errors]} if record.errors else None
    values: dict[str, Any] = {
        "attributes": dict(record.attributes),
        "Id": record.id,
        "IsDeleted": record.is_deleted,
        "CreatedDate": record.created_date,
        "CreatedById": record.created_by_id,
        "LastModifiedDate": record.last_modified_date,
        "LastModifiedById": record.last_modified_by_id,
        "SystemModstamp": record.system_modstamp,
        "MetadataPackageId": record.metadata_package_id or None,
        "MetadataPackageVersionId": record.metadata_package_version_id or None,
        "IsReleaseVersion": record.is_release_version,
        "VersionName": record.version_name or None,
        "Description": record.description,
        "MajorVersion": record.major_version,
        "MinorVersion": record.minor_version,
        "ReleaseNotesUrl": record.release_notes_url,
        "PostInstallUrl": record.post_install_url,
        "Password": record.password,
        "Status": record.status.value,
        "Errors": errors,
    }
    return {name: values[name] for name in MACHINE_FIELDS}


def report_command(request_id: str, hub: str) -> str:
    """The command line that reports on *request_id* later."""
    return f"{REPORT_COMMAND} -i {request_id} -o {hub}"


def status_lines(record: UploadRequest, hub: str) -> list[str]:
    """Summary lines printed after submitting (and possibly waiting).

    ``ERROR`` records are not summarised here; the command raises
    ``UploadFailedError`` for them.
    """
    if record.status is UploadStatus.SUCCESS:
        return [f"Successfully uploaded package [{record.metadata_package_version_id}]"]
    return [
        "PackageUploadRequest has been enqueued. You can query the status using",
        report_command(record.id, hub),
    ]


def still_running_lines(record: UploadRequest, hub: str) -> list[str]:
    """Lines printed when the wait budget ran out before the upload settled."""
    return [
        f"PackageUploadRequest {record.id} is still {record.status.display.lower()}. "
        "Check again with:",
        report_command(record.id, hub),
    ]
