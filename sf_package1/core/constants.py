"""Shared constants — single source of truth.

Centralises the install URL base, SObject names, and polling defaults
used by the operations, the API adapter, and the CLI.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Install URL
# ---------------------------------------------------------------------------

INSTALL_URL_BASE: str = "https://login.salesforce.com/packaging/installPackage.apexp?p0="
"""Prefix for subscriber install links; the ``04t`` version id is appended."""

# ---------------------------------------------------------------------------
# SObjects
# ---------------------------------------------------------------------------

PACKAGE_UPLOAD_REQUEST: str = "PackageUploadRequest"
PACKAGE2: str = "Package2"
METADATA_PACKAGE_VERSION: str = "MetadataPackageVersion"

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_API_VERSION: str = "59.0"
DEFAULT_POLL_INTERVAL_SECONDS: float = 5.0
DEFAULT_HTTP_TIMEOUT_SECONDS: float = 30.0
DEFAULT_AUTH_FILE: str = "~/.sf-package1/orgs.json"
DEFAULT_PROJECT_FILE: str = "sfdx-project.json"

#: First API version that exposes ``Package2.AppAnalyticsEnabled``.
APP_ANALYTICS_MIN_API_VERSION: float = 59.0

#: This tool's command for checking on an upload request later.
REPORT_COMMAND: str = "sf-package1 package1 version create get"


def api_version_number(api_version: str) -> float:
    """Return *api_version* (``"59.0"``) as a float for comparisons.

    Raises:
        ValueError: If the string is not a dotted number.
    """
    return float(api_version)
