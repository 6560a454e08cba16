"""Shared pytest fixtures for the sf-package1 test suite."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from sf_package1.core.config import CliConfig
from sf_package1.core.session import HubSession
from tests.fakes import PACKAGE_ID, FakePackagingApi

# ---------------------------------------------------------------------------
# Configuration and session fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config(tmp_path: Path) -> CliConfig:
    """Config pointing at per-test auth and project files, with a fast poll."""
    return CliConfig(
        default_hub="1gp",
        poll_interval_seconds=0.01,
        auth_file=str(tmp_path / "orgs.json"),
        project_file=str(tmp_path / "sfdx-project.json"),
    )


@pytest.fixture()
def session() -> HubSession:
    return HubSession(
        alias="1gp",
        instance_url="https://example.my.salesforce.com",
        access_token="00Dxx!token",
        api_version="59.0",
        username="admin@example.com",
    )


@pytest.fixture()
def auth_file(tmp_path: Path) -> Path:
    """An auth file holding one ``1gp`` org."""
    path = tmp_path / "orgs.json"
    path.write_text(
        json.dumps(
            {
                "orgs": {
                    "1gp": {
                        "username": "admin@example.com",
                        "instanceUrl": "https://example.my.salesforce.com/",
                        "accessToken": "00Dxx!token",
                    }
                }
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture()
def project_file(tmp_path: Path) -> Path:
    """An ``sfdx-project.json`` with two aliases for one package."""
    path = tmp_path / "sfdx-project.json"
    path.write_text(
        json.dumps(
            {
                "packageDirectories": [{"path": "force-app", "default": True}],
                "packageAliases": {
                    "Widgets": "0Hoxx0000000001AAA",
                    "widgets-legacy": "0Hoxx0000000001AAA",
                    "Gadgets": "0Hoxx0000000002AAA",
                    "OneGP": PACKAGE_ID,
                },
            }
        ),
        encoding="utf-8",
    )
    return path


# ---------------------------------------------------------------------------
# API fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_api() -> FakePackagingApi:
    """Fake API whose uploads go QUEUED → IN_PROGRESS → SUCCESS."""
    return FakePackagingApi(status_script=["IN_PROGRESS", "SUCCESS"])
