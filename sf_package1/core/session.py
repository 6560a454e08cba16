"""Authenticated hub session resolution.

A ``HubSession`` is the opaque credential-bearing handle the API adapter
uses for every call.  Sessions are resolved from a JSON auth file keyed
by alias or username::

    {
        "orgs": {
            "1gp": {
                "username": "admin@example.com",
                "instanceUrl": "https://example.my.salesforce.com",
                "accessToken": "00D...!AQ..."
            }
        }
    }

When the alias is not in the file, the ``SF_INSTANCE_URL`` and
``SF_ACCESS_TOKEN`` environment variables are used as a single
anonymous session (handy in CI).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sf_package1.core.exceptions import ValidationError

if TYPE_CHECKING:
    from sf_package1.core.config import CliConfig

logger = logging.getLogger("sf_package1.core.session")


class SessionNotFoundError(ValidationError):
    """Raised when no session can be resolved for a hub alias.

    Attributes:
        alias: The alias or username that was looked up.
    """

    default_stage = "session"
    default_code = "SESSION_NOT_FOUND"

    def __init__(self, alias: str, message: str = "") -> None:
        self.alias = alias
        super().__init__(message or f"No authorization information found for {alias!r}")


@dataclass(frozen=True, slots=True)
class HubSession:
    """Authenticated session for a Dev Hub or packaging org.

    Attributes:
        alias: Alias or username the session was resolved from.
        instance_url: Org base URL (no trailing slash).
        access_token: OAuth access token / session id.
        api_version: REST API version to call (e.g. ``"59.0"``).
        username: Org username, if known.
    """

    alias: str
    instance_url: str
    access_token: str
    api_version: str
    username: str = ""

    def __post_init__(self) -> None:
        if not self.instance_url.startswith("https://"):
            raise SessionNotFoundError(
                self.alias,
                f"Session for {self.alias!r} has no https instance URL: {self.instance_url!r}",
            )
        if not self.access_token:
            raise SessionNotFoundError(
                self.alias, f"Session for {self.alias!r} has no access token"
            )

    def with_api_version(self, api_version: str) -> HubSession:
        """Return a copy of this session targeting another API version."""
        return HubSession(
            alias=self.alias,
            instance_url=self.instance_url,
            access_token=self.access_token,
            api_version=api_version,
            username=self.username,
        )

    def __repr__(self) -> str:
        return (
            f"HubSession(alias={self.alias!r}, instance_url={self.instance_url!r}, "
            f"api_version={self.api_version!r}, username={self.username!r})"
        )


def resolve_session(alias: str, config: CliConfig) -> HubSession:
    """Resolve the session for *alias* (or the configured default hub).

    Args:
        alias: Alias or username from the command flags; empty means
            ``config.default_hub``.
        config: CLI configuration (auth file location, API version).

    Returns:
        A ``HubSession`` ready to hand to the API adapter.

    Raises:
        SessionNotFoundError: If neither the auth file nor the
            environment supplies a session.
    """
    target = alias or config.default_hub
    orgs = _load_auth_file(Path(config.auth_file).expanduser())

    entry = _find_entry(orgs, target) if target else None
    if entry is not None:
        logger.debug("Session resolved from auth file | alias=%s", target)
        return HubSession(
            alias=target,
            instance_url=str(entry.get("instanceUrl", "")).rstrip("/"),
            access_token=str(entry.get("accessToken", "")),
            api_version=str(entry.get("apiVersion") or config.api_version),
            username=str(entry.get("username", "")),
        )

    instance_url = os.getenv("SF_INSTANCE_URL", "")
    access_token = os.getenv("SF_ACCESS_TOKEN", "")
    if instance_url and access_token:
        logger.debug("Session resolved from environment | alias=%s", target or "<env>")
        return HubSession(
            alias=target,
            instance_url=instance_url.rstrip("/"),
            access_token=access_token,
            api_version=config.api_version,
        )

    if not target:
        msg = "No target hub specified and no default hub configured (set SF_TARGET_DEV_HUB)"
        raise SessionNotFoundError("", msg)
    raise SessionNotFoundError(target)


def _load_auth_file(path: Path) -> dict[str, dict[str, Any]]:
    """Return the ``orgs`` mapping from *path*, or an empty dict if absent."""
    if not path.is_file():
        return {}
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Cannot read auth file {str(path)!r}: {exc}"
        raise SessionNotFoundError("", msg) from exc
    orgs = raw.get("orgs", {}) if isinstance(raw, dict) else {}
    return {str(k): v for k, v in orgs.items() if isinstance(v, dict)}


def _find_entry(orgs: dict[str, dict[str, Any]], target: str) -> dict[str, Any] | None:
    """Look *target* up by alias first, then by username."""
    if target in orgs:
        return orgs[target]
    for entry in orgs.values():
        if entry.get("username") == target:
            return entry
    return None
