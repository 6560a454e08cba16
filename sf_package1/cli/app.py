"""Click entry point — ``sf-package1``.

Purely the wiring layer between ``click`` and the command functions in
``sf_package1.cli.commands``: flag declarations, logging setup, and the
mapping of ``PackagingError`` to exit codes.

Command tree::

    sf-package1 package1 version create [get]
    sf-package1 package1 version list
    sf-package1 package list
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import click

from sf_package1 import __version__
from sf_package1.cli.commands import (
    CommandContext,
    package_list,
    version_create,
    version_create_get,
    version_list,
)
from sf_package1.cli.output import Output
from sf_package1.core.config import CliConfig
from sf_package1.core.exceptions import OperationCancelledError, PackagingError
from sf_package1.models.upload import UploadRequestParams

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("sf_package1.cli.app")

EXIT_FAILURE = 1
EXIT_CANCELLED = 130

LOG_LEVELS: dict[str, int] = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


def configure_logging(level_name: str) -> None:
    """Send log records at *level_name* and above to stderr."""
    logging.basicConfig(
        stream=sys.stderr,
        level=LOG_LEVELS[level_name.lower()],
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
        force=True,
    )


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add ``--json`` and ``--loglevel`` to a command."""
    func = click.option(
        "--json", "json_mode", is_flag=True, help="Format output as JSON."
    )(func)
    return click.option(
        "--loglevel",
        type=click.Choice(sorted(LOG_LEVELS), case_sensitive=False),
        default="warn",
        show_default=True,
        help="Logging level for this command invocation.",
    )(func)


def _run(
    ctx: click.Context, json_mode: bool, loglevel: str, command: Callable[[Output], Any]
) -> None:
    """Run *command*, emit its result, and map failures to exit codes."""
    configure_logging(loglevel)
    out = Output(json_mode=json_mode)
    try:
        result = command(out)
    except OperationCancelledError as exc:
        out.error(exc, EXIT_CANCELLED)
        ctx.exit(EXIT_CANCELLED)
    except PackagingError as exc:
        logger.debug("Command failed | code=%s | stage=%s", exc.code, exc.stage, exc_info=True)
        out.error(exc, EXIT_FAILURE)
        ctx.exit(EXIT_FAILURE)
    else:
        out.result(result)


def _require(value: object, flag: str) -> None:
    if value is None or value == "":
        msg = f"Missing option '{flag}'."
        raise click.UsageError(msg)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(__version__, prog_name="sf-package1")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Manage first-generation (1GP) Salesforce package versions."""
    if ctx.obj is not None:
        return
    try:
        ctx.obj = CommandContext.from_config(CliConfig.from_env())
    except (PackagingError, ValueError) as exc:
        click.echo(click.style("Error (CONFIG): ", fg="red", bold=True) + str(exc), err=True)
        ctx.exit(EXIT_FAILURE)


@cli.group()
def package1() -> None:
    """Work with first-generation managed packages."""


@package1.group()
def version() -> None:
    """Create and list 1GP package versions."""


@cli.group()
def package() -> None:
    """Work with packages on a Dev Hub."""


# ---------------------------------------------------------------------------
# package1 version create
# ---------------------------------------------------------------------------


@version.group(invoke_without_command=True)
@click.option("-i", "--package-id", help="ID of the metadata package (starts with 033). [required]")
@click.option("-n", "--name", help="Package version name. [required]")
@click.option("-d", "--description", default=None, help="Package version description.")
@click.option("-v", "--version", "version_number", default=None,
              help="Package version in major.minor format, for example, 3.2.")
@click.option("-m", "--managed-released", is_flag=True,
              help="Create a managed package version (not a beta).")
@click.option("-r", "--release-notes-url", default=None, help="Release notes URL.")
@click.option("-p", "--post-install-url", default=None, help="Post install URL.")
@click.option("-k", "--installation-key", default=None,
              help="Installation key for key-protected package.")
@click.option("-w", "--wait", "wait_minutes", type=click.FloatRange(min=0), default=0,
              show_default=True, help="Minutes to wait for the package version to be created.")
@click.option("-o", "--target-org", "hub", default="",
              help="Username or alias of the packaging org (defaults to SF_TARGET_DEV_HUB).")
@common_options
@click.pass_context
def create(
    ctx: click.Context,
    package_id: str | None,
    name: str | None,
    description: str | None,
    version_number: str | None,
    managed_released: bool,
    release_notes_url: str | None,
    post_install_url: str | None,
    installation_key: str | None,
    wait_minutes: float,
    hub: str,
    json_mode: bool,
    loglevel: str,
) -> None:
    """Create a first-generation package version in the packaging org.

    Without --wait the upload is enqueued and the request id is printed;
    check on it later with "package1 version create get".
    """
    if ctx.invoked_subcommand is not None:
        return
    _require(package_id, "-i' / '--package-id")
    _require(name, "-n' / '--name")
    command_ctx: CommandContext = ctx.find_root().obj

    def command(out: Output) -> Any:
        params = UploadRequestParams(
            package_id=str(package_id),
            name=str(name),
            description=description,
            version=version_number,
            managed_released=managed_released,
            release_notes_url=release_notes_url,
            post_install_url=post_install_url,
            installation_key=installation_key,
        )
        return version_create(command_ctx, out, params, hub=hub, wait_minutes=wait_minutes)

    _run(ctx, json_mode, loglevel, command)


@create.command("get")
@click.option("-i", "--request-id", required=True,
              help="ID of the PackageUploadRequest (starts with 0HD).")
@click.option("-o", "--target-org", "hub", default="",
              help="Username or alias of the packaging org (defaults to SF_TARGET_DEV_HUB).")
@common_options
@click.pass_context
def create_get(
    ctx: click.Context, request_id: str, hub: str, json_mode: bool, loglevel: str
) -> None:
    """Retrieve the status of a package version upload request."""
    command_ctx: CommandContext = ctx.find_root().obj
    _run(
        ctx,
        json_mode,
        loglevel,
        lambda out: version_create_get(command_ctx, out, request_id=request_id, hub=hub),
    )


# ---------------------------------------------------------------------------
# package1 version list
# ---------------------------------------------------------------------------


@version.command("list")
@click.option("-i", "--package-id", default=None,
              help="Only list versions of this metadata package (starts with 033).")
@click.option("-o", "--target-org", "hub", default="",
              help="Username or alias of the packaging org (defaults to SF_TARGET_DEV_HUB).")
@common_options
@click.pass_context
def version_list_command(
    ctx: click.Context, package_id: str | None, hub: str, json_mode: bool, loglevel: str
) -> None:
    """List package versions for the specified first-generation package or for the org."""
    command_ctx: CommandContext = ctx.find_root().obj
    _run(
        ctx,
        json_mode,
        loglevel,
        lambda out: version_list(command_ctx, out, package_id=package_id, hub=hub),
    )


# ---------------------------------------------------------------------------
# package list
# ---------------------------------------------------------------------------


@package.command("list")
@click.option("-v", "--target-dev-hub", "hub", default="",
              help="Username or alias of the Dev Hub org (defaults to SF_TARGET_DEV_HUB).")
@click.option("--api-version", default=None, help="Override the API version used for the query.")
@click.option("--verbose", is_flag=True, help="Display extended package detail.")
@common_options
@click.pass_context
def package_list_command(
    ctx: click.Context,
    hub: str,
    api_version: str | None,
    verbose: bool,
    json_mode: bool,
    loglevel: str,
) -> None:
    """List all packages in the Dev Hub org."""
    command_ctx: CommandContext = ctx.find_root().obj
    _run(
        ctx,
        json_mode,
        loglevel,
        lambda out: package_list(
            command_ctx, out, hub=hub, api_version=api_version, verbose=verbose
        ),
    )


def main() -> None:
    """Console-script entry point."""
    cli()
