"""List packages operation — ``Package2`` records of a Dev Hub.

Deprecated packages are dropped.  Each row is decorated with the
aliases the local ``sfdx-project.json`` defines for the package id.

The column set depends on ``--verbose`` and on the API version:
``AppAnalyticsEnabled`` only exists from API 59.0 on.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sf_package1.core.constants import APP_ANALYTICS_MIN_API_VERSION, api_version_number
from sf_package1.core.exceptions import ValidationError
from sf_package1.models.package import Package2, PackageListRow

if TYPE_CHECKING:
    from sf_package1.api.base import PackagingApi

logger = logging.getLogger("sf_package1.operations.list_packages")

#: (row attribute, header) for the default columns.
BASE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("namespace_prefix", "Namespace Prefix"),
    ("name", "Name"),
    ("id", "Id"),
    ("alias", "Alias"),
    ("description", "Description"),
    ("container_options", "Type"),
)

VERBOSE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("subscriber_package_id", "Package Id"),
    ("converted_from_package_id", "Converted From Package Id"),
    ("is_org_dependent", "Org-Dependent Unlocked Package"),
    ("package_error_username", "Error Notification Username"),
)

APP_ANALYTICS_COLUMN: tuple[str, str] = ("app_analytics_enabled", "App Analytics Enabled")
CREATED_BY_COLUMN: tuple[str, str] = ("created_by", "Created By")


class ProjectFileError(ValidationError):
    """Raised when ``sfdx-project.json`` exists but cannot be read."""

    default_stage = "project"
    default_code = "PROJECT_FILE_INVALID"


def load_package_aliases(project_file: str | Path) -> dict[str, str]:
    """Return ``packageAliases`` from *project_file* (alias → id).

    A missing file yields an empty mapping.

    Raises:
        ProjectFileError: If the file is not valid JSON.
    """
    path = Path(project_file)
    if not path.is_file():
        return {}
    try:
        project = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Cannot read project file {str(path)!r}: {exc}"
        raise ProjectFileError(msg) from exc
    aliases = project.get("packageAliases", {}) if isinstance(project, dict) else {}
    return {str(k): str(v) for k, v in aliases.items()}


def aliases_for(package_id: str, package_aliases: dict[str, str]) -> list[str]:
    """Every alias whose value is *package_id*, in file order."""
    return [alias for alias, value in package_aliases.items() if value == package_id]


def list_packages(
    api: PackagingApi,
    *,
    api_version: str,
    package_aliases: dict[str, str] | None = None,
) -> list[PackageListRow]:
    """Return the display rows for every non-deprecated package of the hub.

    Raises:
        RemoteError: On remote failures.
        RecordContractError: If a record has no ``Id``.
    """
    package_aliases = package_aliases or {}
    packages = [Package2.from_record(r) for r in api.list_packages(api_version)]
    rows = [
        PackageListRow.from_package(p, aliases_for(p.id, package_aliases))
        for p in packages
        if not p.is_deprecated
    ]
    logger.info(
        "list_packages completed | total=%d | listed=%d | api_version=%s",
        len(packages),
        len(rows),
        api_version,
    )
    return rows


def package_list_columns(*, verbose: bool, api_version: str) -> list[tuple[str, str]]:
    """Columns shown by ``package list`` for the given flags."""
    columns = list(BASE_COLUMNS)
    if verbose:
        columns.extend(VERBOSE_COLUMNS)
        if api_version_number(api_version) >= APP_ANALYTICS_MIN_API_VERSION:
            columns.append(APP_ANALYTICS_COLUMN)
        columns.append(CREATED_BY_COLUMN)
    return columns
