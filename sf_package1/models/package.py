"""Typed models for packages and 1GP package versions.

- ``Package2`` / ``PackageListRow``: hub packages and their display row.
- ``MetadataPackageVersion`` / ``PackageVersionRow``: 1GP versions and
  their display row.

Rows are built by explicit mapping functions; every output key is
listed once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sf_package1.models.upload import RecordContractError

_MANAGED = "Managed"


# ---------------------------------------------------------------------------
# Package2
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Package2:
    """A ``Package2`` record as returned by the Tooling API."""

    id: str
    subscriber_package_id: str | None = None
    name: str | None = None
    description: str | None = None
    namespace_prefix: str | None = None
    container_options: str | None = None
    converted_from_package_id: str | None = None
    is_org_dependent: bool = False
    package_error_username: str | None = None
    app_analytics_enabled: bool | None = None
    created_by_id: str | None = None
    is_deprecated: bool = False

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Package2:
        record_id = record.get("Id")
        if not record_id:
            msg = "Package2 record has no Id"
            raise RecordContractError(msg)
        app_analytics = record.get("AppAnalyticsEnabled")
        return cls(
            id=str(record_id),
            subscriber_package_id=record.get("SubscriberPackageId"),
            name=record.get("Name"),
            description=record.get("Description"),
            namespace_prefix=record.get("NamespacePrefix"),
            container_options=record.get("ContainerOptions"),
            converted_from_package_id=record.get("ConvertedFromPackageId"),
            is_org_dependent=bool(record.get("IsOrgDependent", False)),
            package_error_username=record.get("PackageErrorUsername"),
            app_analytics_enabled=None if app_analytics is None else bool(app_analytics),
            created_by_id=record.get("CreatedById"),
            is_deprecated=bool(record.get("IsDeprecated", False)),
        )


@dataclass(frozen=True, slots=True)
class PackageListRow:
    """One row of ``package list`` output."""

    id: str
    subscriber_package_id: str | None
    name: str | None
    description: str | None
    namespace_prefix: str | None
    container_options: str | None
    converted_from_package_id: str | None
    alias: str
    is_org_dependent: str
    package_error_username: str | None
    app_analytics_enabled: bool | None
    created_by: str | None

    @classmethod
    def from_package(cls, package: Package2, aliases: list[str]) -> PackageListRow:
        """Build the display row for *package* with its project *aliases*."""
        if package.container_options == _MANAGED:
            org_dependent = "N/A"
        else:
            org_dependent = "Yes" if package.is_org_dependent else "No"
        return cls(
            id=package.id,
            subscriber_package_id=package.subscriber_package_id,
            name=package.name,
            description=package.description,
            namespace_prefix=package.namespace_prefix,
            container_options=package.container_options,
            converted_from_package_id=package.converted_from_package_id,
            alias=",".join(aliases),
            is_org_dependent=org_dependent,
            package_error_username=package.package_error_username,
            app_analytics_enabled=package.app_analytics_enabled,
            created_by=package.created_by_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON shape, keyed by SObject-style field names."""
        return {
            "Id": self.id,
            "SubscriberPackageId": self.subscriber_package_id,
            "Name": self.name,
            "Description": self.description,
            "NamespacePrefix": self.namespace_prefix,
            "ContainerOptions": self.container_options,
            "ConvertedFromPackageId": self.converted_from_package_id,
            "Alias": self.alias,
            "IsOrgDependent": self.is_org_dependent,
            "PackageErrorUsername": self.package_error_username,
            "AppAnalyticsEnabled": self.app_analytics_enabled,
            "CreatedBy": self.created_by,
        }


# ---------------------------------------------------------------------------
# MetadataPackageVersion
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MetadataPackageVersion:
    """A 1GP ``MetadataPackageVersion`` record."""

    id: str
    metadata_package_id: str
    name: str
    release_state: str
    major_version: int
    minor_version: int
    patch_version: int
    build_number: int

    @property
    def version(self) -> str:
        return f"{self.major_version}.{self.minor_version}.{self.patch_version}"

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> MetadataPackageVersion:
        record_id = record.get("Id")
        if not record_id:
            msg = "MetadataPackageVersion record has no Id"
            raise RecordContractError(msg)
        try:
            return cls(
                id=str(record_id),
                metadata_package_id=str(record.get("MetadataPackageId") or ""),
                name=str(record.get("Name") or ""),
                release_state=str(record.get("ReleaseState") or ""),
                major_version=int(record.get("MajorVersion") or 0),
                minor_version=int(record.get("MinorVersion") or 0),
                patch_version=int(record.get("PatchVersion") or 0),
                build_number=int(record.get("BuildNumber") or 0),
            )
        except (TypeError, ValueError) as exc:
            msg = f"MetadataPackageVersion {record_id} has a non-numeric version part: {exc}"
            raise RecordContractError(msg, correlation_id=str(record_id)) from exc


@dataclass(frozen=True, slots=True)
class PackageVersionRow:
    """One row of ``package1 version list`` output."""

    metadata_package_version_id: str
    metadata_package_id: str
    name: str
    release_state: str
    version: str
    build_number: int

    @classmethod
    def from_version(cls, version: MetadataPackageVersion) -> PackageVersionRow:
        return cls(
            metadata_package_version_id=version.id,
            metadata_package_id=version.metadata_package_id,
            name=version.name,
            release_state=version.release_state,
            version=version.version,
            build_number=version.build_number,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "MetadataPackageVersionId": self.metadata_package_version_id,
            "MetadataPackageId": self.metadata_package_id,
            "Name": self.name,
            "ReleaseState": self.release_state,
            "Version": self.version,
            "BuildNumber": self.build_number,
        }
