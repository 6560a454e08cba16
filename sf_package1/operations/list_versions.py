"""List 1GP package versions operation.

Returns ``MetadataPackageVersion`` rows of the packaging org, optionally
restricted to one ``033`` package id, ordered by package then version.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sf_package1.models.package import MetadataPackageVersion, PackageVersionRow

if TYPE_CHECKING:
    from sf_package1.api.base import PackagingApi

logger = logging.getLogger("sf_package1.operations.list_versions")

VERSION_COLUMNS: tuple[tuple[str, str], ...] = (
    ("metadata_package_version_id", "Metadata Package Version Id"),
    ("metadata_package_id", "Metadata Package Id"),
    ("name", "Name"),
    ("version", "Version"),
    ("release_state", "Release State"),
    ("build_number", "Build Number"),
)


def list_package_versions(
    api: PackagingApi,
    package_id: str | None = None,
) -> list[PackageVersionRow]:
    """Return display rows for the org's 1GP package versions.

    Raises:
        ValidationError: If *package_id* is not a Salesforce id.
        RemoteError: On remote failures.
    """
    records = api.list_package_versions(package_id)
    versions = [MetadataPackageVersion.from_record(r) for r in records]
    logger.info(
        "list_package_versions completed | package_id=%s | versions=%d",
        package_id or "<all>",
        len(versions),
    )
    return [PackageVersionRow.from_version(v) for v in versions]
