"""Submit upload operation — start a new package version upload.

Issues exactly one ``PackageUploadRequest`` create call and returns the
operation handle together with the record the create call produced.
It does **not** wait; ``WaitCoordinator`` drives polling.

Callers must not submit twice for the same intent: there is no
idempotency key at this layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sf_package1.models.upload import OperationHandle, UploadRequest

if TYPE_CHECKING:
    from sf_package1.api.base import PackagingApi
    from sf_package1.models.upload import UploadRequestParams


@dataclass(frozen=True, slots=True)
class Submission:
    """Result of a successful submit.

    Attributes:
        handle: Id of the new upload request.
        record: The request's state as returned by the create call.
    """

    handle: OperationHandle
    record: UploadRequest


def submit_upload(api: PackagingApi, params: UploadRequestParams) -> Submission:
    """Submit a package version upload.

    Args:
        api: Packaging API adapter bound to the target hub.
        params: Upload parameters.

    Returns:
        A ``Submission`` carrying the handle and the initial record.

    Raises:
        RemoteError: If the remote system rejects the request.
        RecordContractError: If the created record cannot be mapped.
    """
    record = UploadRequest.from_record(api.create_upload_request(params.to_record()))
    return Submission(handle=OperationHandle(id=record.id), record=record)
