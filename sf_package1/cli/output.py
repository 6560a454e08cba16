"""Terminal and JSON output for the commands.

``Output`` is the output sink handed to every command.  In human mode
it writes headers, tables and status lines with ``click.echo``; in JSON
mode it buffers nothing and writes exactly one envelope to stdout:

    {"status": 0, "result": ..., "warnings": [...]}                # success
    {"status": 1, "name": ..., "code": ..., "correlation_id": ..., ...}  # failure
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import click

from sf_package1.core.exceptions import OperationStateError, PackagingError
from sf_package1.operations.report import machine_record

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@dataclass
class Output:
    """Output sink for one command invocation.

    Attributes:
        json_mode: Emit a single JSON envelope instead of human text.
        warnings: Warnings collected for the JSON envelope.
    """

    json_mode: bool = False
    warnings: list[str] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Human output
    # ------------------------------------------------------------------

    def header(self, text: str) -> None:
        if self.json_mode:
            return
        click.echo(click.style(text, fg="blue", bold=True))
        click.echo(click.style("=" * len(text), fg="blue"))

    def lines(self, lines: Iterable[str]) -> None:
        if self.json_mode:
            return
        for line in lines:
            click.echo(line)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        if not self.json_mode:
            click.echo(click.style(f"Warning: {message}", fg="yellow"), err=True)

    def key_value_table(self, rows: Sequence[tuple[str, str]]) -> None:
        """Render ``(label, value)`` rows under ``Name`` / ``Value`` headers."""
        self.table(["Name", "Value"], [[label, value] for label, value in rows])

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
        """Render *rows* as left-aligned columns.

        Multi-line cells continue on following lines in the same column.
        """
        if self.json_mode:
            return
        cells = [[_cell_lines(value) for value in row] for row in rows]
        widths = [len(h) for h in headers]
        for row in cells:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], *(len(part) for part in cell))

        click.echo(" ".join(h.ljust(w) for h, w in zip(headers, widths, strict=True)).rstrip())
        click.echo(" ".join("─" * w for w in widths))
        for row in cells:
            height = max(len(cell) for cell in row)
            for line_no in range(height):
                parts = [
                    (cell[line_no] if line_no < len(cell) else "").ljust(width)
                    for cell, width in zip(row, widths, strict=True)
                ]
                click.echo(" ".join(parts).rstrip())

    # ------------------------------------------------------------------
    # JSON envelopes
    # ------------------------------------------------------------------

    def result(self, result: Any) -> None:
        """Emit the success envelope (JSON mode only)."""
        if not self.json_mode:
            return
        envelope = {"status": 0, "result": result, "warnings": list(self.warnings)}
        click.echo(json.dumps(envelope, indent=2, default=str))

    def error(self, exc: PackagingError, exit_code: int) -> None:
        """Report *exc* as a JSON error envelope or a message on stderr.

        The envelope carries ``exc.to_error_dict()``, so the request id
        (``correlation_id``) and ``retryable`` reach JSON consumers.
        """
        if not self.json_mode:
            label = click.style(f"Error ({exc.code or type(exc).__name__}):", fg="red", bold=True)
            request_id = exc.correlation_id
            suffix = f" (request {request_id})" if request_id and request_id not in str(exc) else ""
            click.echo(f"{label} {exc}{suffix}", err=True)
            return
        envelope: dict[str, Any] = {
            "status": exit_code,
            "name": type(exc).__name__,
            **exc.to_error_dict(),
            "context": exc.stage,
            "exitCode": exit_code,
            "warnings": list(self.warnings),
        }
        if isinstance(exc, OperationStateError):
            envelope["data"] = machine_record(exc.last_record)
        click.echo(json.dumps(envelope, indent=2, default=str))


def _cell_lines(value: object) -> list[str]:
    if value is None:
        return [""]
    if isinstance(value, bool):
        return ["true" if value else "false"]
    return str(value).split("\n")
