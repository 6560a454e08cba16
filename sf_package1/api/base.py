"""PackagingApi abstract base class.

Defines the contract every packaging API adapter must implement.  The
submit/poll engine and the list commands talk only to this interface.

Lifecycle of an upload:
    1. ``create_upload_request(record)`` — start the upload, get its record.
    2. ``get_upload_request(id)``        — fetch the current record.

Listing:
    - ``list_packages(api_version)``       — ``Package2`` records of the hub.
    - ``list_package_versions(package_id)`` — 1GP ``MetadataPackageVersion``s.

``SalesforceRestApi`` implements these calls over the Salesforce REST
and Tooling APIs; tests use an in-memory fake.
"""

from __future__ import annotations

import abc
from typing import Any


class PackagingApi(abc.ABC):
    """Abstract base class for packaging API adapters."""

    @abc.abstractmethod
    def create_upload_request(self, record: dict[str, Any]) -> dict[str, Any]:
        """Create a ``PackageUploadRequest`` and return its full record.

        Exactly one creation request is issued per call.

        Raises:
            RemoteError: When the remote system rejects the request.
        """

    @abc.abstractmethod
    def get_upload_request(self, request_id: str) -> dict[str, Any]:
        """Return the current ``PackageUploadRequest`` record for *request_id*.

        Raises:
            NotFoundError: If the id is unknown to the remote system.
            RemoteError: On transport, auth, or server failures.
        """

    @abc.abstractmethod
    def list_packages(self, api_version: str) -> list[dict[str, Any]]:
        """Return every ``Package2`` record visible to the hub.

        ``AppAnalyticsEnabled`` is only selected when *api_version*
        supports it.

        Raises:
            RemoteError: On transport, auth, or server failures.
        """

    @abc.abstractmethod
    def list_package_versions(self, package_id: str | None = None) -> list[dict[str, Any]]:
        """Return ``MetadataPackageVersion`` records, optionally for one package.

        Raises:
            RemoteError: On transport, auth, or server failures.
        """

    def close(self) -> None:
        """Release any held resources (connections).  No-op by default."""

    def __enter__(self) -> PackagingApi:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
