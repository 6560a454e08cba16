"""Command implementations.

Each command is a plain function taking the invocation context, an
output sink, and already-parsed flag values.  It returns the JSON
``result`` payload and writes human output through ``Output``.  Errors
propagate as ``PackagingError`` subclasses; ``sf_package1.cli.app``
maps them to exit codes.
"""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sf_package1.api.rest import SalesforceRestApi
from sf_package1.core.constants import api_version_number
from sf_package1.core.exceptions import (
    OperationTimeoutError,
    UploadFailedError,
    ValidationError,
)
from sf_package1.core.session import resolve_session
from sf_package1.operations.list_packages import (
    list_packages,
    load_package_aliases,
    package_list_columns,
)
from sf_package1.operations.list_versions import VERSION_COLUMNS, list_package_versions
from sf_package1.operations.poll_upload import poll_upload
from sf_package1.operations.report import (
    human_rows,
    machine_record,
    status_lines,
    still_running_lines,
)
from sf_package1.operations.submit_upload import submit_upload
from sf_package1.operations.wait import WaitCoordinator

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sf_package1.api.base import PackagingApi
    from sf_package1.cli.output import Output
    from sf_package1.core.config import CliConfig
    from sf_package1.models.upload import UploadRequestParams

    ApiFactory = Callable[[str, str | None], PackagingApi]

logger = logging.getLogger("sf_package1.cli.commands")


def rest_api_factory(config: CliConfig) -> ApiFactory:
    """Return a factory building ``SalesforceRestApi`` adapters for a hub alias."""

    def factory(hub: str, api_version: str | None) -> PackagingApi:
        session = resolve_session(hub, config)
        if api_version:
            session = session.with_api_version(api_version)
        return SalesforceRestApi(session, timeout=config.http_timeout_seconds)

    return factory


@dataclass
class CommandContext:
    """Collaborators injected into every command.

    Attributes:
        config: CLI configuration for this invocation.
        api_factory: Builds a ``PackagingApi`` for ``(hub, api_version)``.
        cancel_event: Set to stop a running wait.
    """

    config: CliConfig
    api_factory: ApiFactory
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def from_config(cls, config: CliConfig) -> CommandContext:
        return cls(config=config, api_factory=rest_api_factory(config))

    def hub_label(self, hub: str) -> str:
        """The hub name to print in follow-up commands."""
        return hub or self.config.default_hub


# ---------------------------------------------------------------------------
# package1 version create
# ---------------------------------------------------------------------------


def version_create(
    ctx: CommandContext,
    out: Output,
    params: UploadRequestParams,
    *,
    hub: str,
    wait_minutes: float,
) -> dict[str, Any]:
    """Submit an upload and, with a wait budget, block until it settles.

    A timed-out wait is reported as still running, not as a failure.

    Raises:
        UploadFailedError: If the upload reached ``ERROR``.
        OperationCancelledError: If the wait was interrupted.
        RemoteError, SessionNotFoundError: From the collaborators.
    """
    hub_label = ctx.hub_label(hub)
    with ctx.api_factory(hub, None) as api:
        submission = submit_upload(api, params)
        logger.info(
            "Upload submitted | request_id=%s | package_id=%s | wait=%s",
            submission.handle.id,
            params.package_id,
            wait_minutes,
        )
        coordinator = WaitCoordinator(
            api,
            poll_interval_seconds=ctx.config.poll_interval_seconds,
            cancel_event=ctx.cancel_event,
        )
        try:
            with _interrupt_cancels(ctx.cancel_event, enabled=wait_minutes > 0):
                record = coordinator.wait_for(submission.record, wait_minutes)
        except OperationTimeoutError as exc:
            out.warn(exc.message)
            out.lines(still_running_lines(exc.last_record, hub_label))
            return machine_record(exc.last_record)

    if record.status.is_failure:
        msg = f"Package upload {record.id} failed: " + "; ".join(record.errors)
        raise UploadFailedError(msg, request_id=record.id, last_record=record)

    out.lines(status_lines(record, hub_label))
    return machine_record(record)


@contextlib.contextmanager
def _interrupt_cancels(event: threading.Event, *, enabled: bool) -> Iterator[None]:
    """Route SIGINT to *event* while waiting, restoring the old handler after.

    The wait loop only reads the event between sleep slices, so setting it
    from the handler cannot contend for the event's internal lock.
    """
    if not enabled or threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, lambda _signum, _frame: event.set())
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


# ---------------------------------------------------------------------------
# package1 version create get
# ---------------------------------------------------------------------------


def version_create_get(
    ctx: CommandContext,
    out: Output,
    *,
    request_id: str,
    hub: str,
) -> dict[str, Any]:
    """Report on one upload request, whatever its status.

    Raises:
        NotFoundError: If the id is unknown.
        RemoteError: On remote failures.
    """
    with ctx.api_factory(hub, None) as api:
        record = poll_upload(api, request_id)

    out.header("Package Version Create Request")
    out.key_value_table(human_rows(record))
    if record.result is not None:
        out.lines([""])
        out.lines(status_lines(record, ctx.hub_label(hub)))
    return machine_record(record)


# ---------------------------------------------------------------------------
# package1 version list
# ---------------------------------------------------------------------------


def version_list(
    ctx: CommandContext,
    out: Output,
    *,
    package_id: str | None,
    hub: str,
) -> list[dict[str, Any]]:
    """List the org's 1GP package versions."""
    with ctx.api_factory(hub, None) as api:
        rows = list_package_versions(api, package_id)

    if not rows:
        out.lines(["No results found"])
        return []
    out.header(f"Package Versions [{len(rows)}]")
    out.table(
        [header for _, header in VERSION_COLUMNS],
        [[getattr(row, attr) for attr, _ in VERSION_COLUMNS] for row in rows],
    )
    return [row.to_dict() for row in rows]


# ---------------------------------------------------------------------------
# package list
# ---------------------------------------------------------------------------


def package_list(
    ctx: CommandContext,
    out: Output,
    *,
    hub: str,
    api_version: str | None,
    verbose: bool,
) -> list[dict[str, Any]]:
    """List the hub's packages, with project aliases."""
    effective_version = api_version or ctx.config.api_version
    try:
        api_version_number(effective_version)
    except ValueError as exc:
        msg = f"Invalid API version {effective_version!r}: expected a number such as '59.0'"
        raise ValidationError(msg, stage="package_list") from exc
    aliases = load_package_aliases(ctx.config.project_file)
    with ctx.api_factory(hub, effective_version) as api:
        rows = list_packages(api, api_version=effective_version, package_aliases=aliases)

    columns = package_list_columns(verbose=verbose, api_version=effective_version)
    out.header(f"Packages [{len(rows)}]")
    out.table(
        [header for _, header in columns],
        [[getattr(row, attr) for attr, _ in columns] for row in rows],
    )
    return [row.to_dict() for row in rows]
