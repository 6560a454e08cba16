"""Command-line interface.

- app: ``click`` command tree and entry point
- commands: Command implementations with injected collaborators
- output: Human table / JSON envelope rendering
"""

from sf_package1.cli.app import cli, main

__all__ = ["cli", "main"]
