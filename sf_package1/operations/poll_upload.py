"""Poll upload operation — a single status check of an upload request.

One remote ``get`` per call; never waits.  ``WaitCoordinator`` calls
this repeatedly, and ``package1 version create get`` calls it once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sf_package1.core.exceptions import ValidationError
from sf_package1.models.upload import UploadRequest

if TYPE_CHECKING:
    from sf_package1.api.base import PackagingApi


def poll_upload(api: PackagingApi, request_id: str) -> UploadRequest:
    """Fetch the current state of upload request *request_id*.

    Raises:
        ValidationError: If *request_id* is empty.
        NotFoundError: If the id is unknown to the remote system.
        RemoteError: On transport, auth, or server failures.
    """
    if not request_id or not request_id.strip():
        msg = "poll_upload: request id is missing"
        raise ValidationError(msg, stage="poll")
    return UploadRequest.from_record(api.get_upload_request(request_id.strip()))
