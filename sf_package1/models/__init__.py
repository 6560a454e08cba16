"""Data models.

Defines the data structures used throughout the tool:
- UploadRequest: State of a package upload request (the tracked operation)
- UploadRequestParams: Parameters for submitting an upload
- Package2 / MetadataPackageVersion: Records listed by the list commands
"""

from sf_package1.models.package import (
    MetadataPackageVersion,
    Package2,
    PackageListRow,
    PackageVersionRow,
)
from sf_package1.models.upload import (
    ModelValidationError,
    OperationHandle,
    RecordContractError,
    UploadRequest,
    UploadRequestParams,
    UploadResult,
    UploadStatus,
)

__all__ = [
    "MetadataPackageVersion",
    "ModelValidationError",
    "OperationHandle",
    "Package2",
    "PackageListRow",
    "PackageVersionRow",
    "RecordContractError",
    "UploadRequest",
    "UploadRequestParams",
    "UploadResult",
    "UploadStatus",
]
