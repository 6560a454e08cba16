"""Salesforce REST / Tooling API adapter.

Concrete ``PackagingApi`` implementation issuing the handful of calls
the tool needs through ``httpx``:

- ``POST /services/data/vXX.X/sobjects/PackageUploadRequest``
- ``GET  /services/data/vXX.X/sobjects/PackageUploadRequest/{id}``
- ``GET  /services/data/vXX.X/tooling/query?q=...`` (``Package2``)
- ``GET  /services/data/vXX.X/query?q=...`` (``MetadataPackageVersion``)

Query results are paged; ``nextRecordsUrl`` is followed until ``done``.

Error mapping:
    401 / 403                          → ``RemoteAuthError``
    404 or a not-found ``errorCode``   → ``NotFoundError`` (record lookups)
    other 4xx                          → ``RemoteError`` (not retryable)
    5xx, transport failures            → ``RemoteError`` (retryable)
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import httpx

from sf_package1.api.base import PackagingApi
from sf_package1.core.constants import (
    APP_ANALYTICS_MIN_API_VERSION,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    METADATA_PACKAGE_VERSION,
    PACKAGE2,
    PACKAGE_UPLOAD_REQUEST,
    api_version_number,
)
from sf_package1.core.exceptions import (
    NotFoundError,
    RemoteAuthError,
    RemoteError,
    ValidationError,
)

if TYPE_CHECKING:
    from sf_package1.core.session import HubSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Salesforce error codes that mean "no such record".
_NOT_FOUND_CODES = frozenset({"NOT_FOUND", "MALFORMED_ID", "INVALID_CROSS_REFERENCE_KEY"})

_ID_RE = re.compile(r"^[a-zA-Z0-9]{15}(?:[a-zA-Z0-9]{3})?$")

_PACKAGE2_FIELDS = (
    "Id",
    "SubscriberPackageId",
    "Name",
    "Description",
    "NamespacePrefix",
    "ContainerOptions",
    "ConvertedFromPackageId",
    "IsOrgDependent",
    "PackageErrorUsername",
    "CreatedById",
    "IsDeprecated",
)

_METADATA_PACKAGE_VERSION_FIELDS = (
    "Id",
    "MetadataPackageId",
    "Name",
    "ReleaseState",
    "MajorVersion",
    "MinorVersion",
    "PatchVersion",
    "BuildNumber",
)


class SalesforceRestApi(PackagingApi):
    """``httpx``-backed adapter for a single authenticated hub session.

    Usable as a context manager; the underlying ``httpx.Client`` is
    closed on exit.

    Args:
        session: Authenticated hub session.
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport (tests pass a
            ``httpx.MockTransport``).
    """

    def __init__(
        self,
        session: HubSession,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._session = session
        self._data_path = f"/services/data/v{session.api_version}"
        self._client = httpx.Client(
            base_url=session.instance_url,
            headers={
                "Authorization": f"Bearer {session.access_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Upload requests
    # ------------------------------------------------------------------

    def create_upload_request(self, record: dict[str, Any]) -> dict[str, Any]:
        path = f"{self._data_path}/sobjects/{PACKAGE_UPLOAD_REQUEST}"
        body = self._request("POST", path, json=record)
        request_id = str(body.get("id", "")) if isinstance(body, dict) else ""
        if not request_id:
            msg = f"{PACKAGE_UPLOAD_REQUEST} create returned no id: {body!r}"
            raise RemoteError(msg, stage="submit")
        logger.info(
            "Upload request created | request_id=%s | package_id=%s | hub=%s",
            request_id,
            record.get("MetadataPackageId", ""),
            self._session.alias,
        )
        try:
            return self.get_upload_request(request_id)
        except (NotFoundError, RemoteError) as exc:
            # The request exists remotely; keep its id so it can be polled later.
            logger.warning(
                "Upload request read-back failed | request_id=%s | error=%s",
                request_id,
                exc,
            )
            return _queued_record(request_id, record)

    def get_upload_request(self, request_id: str) -> dict[str, Any]:
        path = f"{self._data_path}/sobjects/{PACKAGE_UPLOAD_REQUEST}/{request_id}"
        body = self._request("GET", path, record_id=request_id)
        if not isinstance(body, dict):
            msg = f"Unexpected {PACKAGE_UPLOAD_REQUEST} response for {request_id}: {body!r}"
            raise RemoteError(msg, stage="poll", correlation_id=request_id)
        logger.debug(
            "Upload request fetched | request_id=%s | status=%s",
            request_id,
            body.get("Status"),
        )
        return body

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_packages(self, api_version: str) -> list[dict[str, Any]]:
        fields = list(_PACKAGE2_FIELDS)
        if api_version_number(api_version) >= APP_ANALYTICS_MIN_API_VERSION:
            fields.append("AppAnalyticsEnabled")
        soql = f"SELECT {', '.join(fields)} FROM {PACKAGE2} ORDER BY NamespacePrefix, Name"
        return self._query(soql, tooling=True)

    def list_package_versions(self, package_id: str | None = None) -> list[dict[str, Any]]:
        fields = ", ".join(_METADATA_PACKAGE_VERSION_FIELDS)
        soql = f"SELECT {fields} FROM {METADATA_PACKAGE_VERSION}"
        if package_id:
            if not _ID_RE.match(package_id):
                msg = f"Invalid package id {package_id!r}: expected a 15 or 18 character id"
                raise ValidationError(msg, stage="list_versions")
            soql += f" WHERE MetadataPackageId = '{package_id}'"
        soql += " ORDER BY MetadataPackageId, MajorVersion, MinorVersion, PatchVersion, BuildNumber"
        return self._query(soql, tooling=False)

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _query(self, soql: str, *, tooling: bool) -> list[dict[str, Any]]:
        """Run *soql* and follow ``nextRecordsUrl`` until every page is read."""
        path = f"{self._data_path}/{'tooling/' if tooling else ''}query"
        logger.debug("Query | tooling=%s | soql=%s", tooling, soql)

        records: list[dict[str, Any]] = []
        body = self._request("GET", path, params={"q": soql})
        while True:
            if not isinstance(body, dict):
                msg = f"Unexpected query response: {body!r}"
                raise RemoteError(msg, stage="query")
            records.extend(r for r in body.get("records", []) if isinstance(r, dict))
            next_url = body.get("nextRecordsUrl")
            if body.get("done", True) or not next_url:
                break
            body = self._request("GET", str(next_url))

        logger.debug("Query completed | records=%d", len(records))
        return records

    def _request(
        self,
        method: str,
        path: str,
        *,
        record_id: str = "",
        **kwargs: Any,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            RemoteAuthError, NotFoundError, RemoteError: See module docstring.
        """
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TransportError as exc:
            msg = f"{method} {path} failed: {exc}"
            raise RemoteError(msg, retryable=True, correlation_id=record_id) from exc

        if response.is_success:
            return response.json() if response.content else {}

        error_code, message = _parse_error_body(response)
        status = response.status_code
        logger.warning(
            "Remote call failed | method=%s | path=%s | status=%d | error_code=%s",
            method,
            path,
            status,
            error_code,
        )

        if status in (401, 403):
            raise RemoteAuthError(
                message or f"Not authorized ({status}) for hub {self._session.alias!r}",
                status_code=status,
                error_code=error_code,
            )
        if record_id and (status == 404 or error_code in _NOT_FOUND_CODES):
            raise NotFoundError(record_id, message)
        raise RemoteError(
            message or f"{method} {path} returned HTTP {status}",
            status_code=status,
            error_code=error_code,
            retryable=status >= 500,
            correlation_id=record_id,
        )


def _queued_record(request_id: str, submitted: dict[str, Any]) -> dict[str, Any]:
    """Minimal QUEUED record for a created request that could not be read back."""
    return {
        "Id": request_id,
        "Status": "QUEUED",
        "MetadataPackageId": submitted.get("MetadataPackageId"),
        "VersionName": submitted.get("VersionName"),
        "Description": submitted.get("Description"),
        "IsReleaseVersion": submitted.get("IsReleaseVersion", False),
    }


def _parse_error_body(response: httpx.Response) -> tuple[str, str]:
    """Return ``(errorCode, message)`` from a Salesforce error response."""
    try:
        body = response.json()
    except ValueError:
        return "", response.text.strip()
    if isinstance(body, list) and body and isinstance(body[0], dict):
        body = body[0]
    if isinstance(body, dict):
        return str(body.get("errorCode", "")), str(body.get("message", ""))
    return "", str(body)
