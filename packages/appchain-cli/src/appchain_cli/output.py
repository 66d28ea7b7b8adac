"""Rich console output utilities for appchain-cli.

Every command result is a single line on standard output. Messages are
markup-escaped, since node error text routinely contains brackets, and
soft-wrapped so hashes are never split across lines.
"""

from __future__ import annotations

import json
import os
from typing import Any

from rich.console import Console
from rich.markup import escape

# Rich respects NO_COLOR on its own; we also honour --no-color
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console instance with appropriate color settings.

    Args:
        no_color: If True, disable colored output. Also respects NO_COLOR env var.

    Returns:
        Configured Console instance.
    """
    disabled = no_color or _force_no_color
    return Console(
        force_terminal=False if disabled else None,
        no_color=disabled,
        highlight=False,
        soft_wrap=True,
    )


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success line with a green checkmark.

    Example:
        >>> success("Declare result: class_hash=0xabc")
        ✓ Declare result: class_hash=0xabc
    """
    console.print(f"[green]✓[/green] {escape(message)}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error line with a red X.

    Example:
        >>> error("Error during declaration: invalid nonce")
        ✗ Error during declaration: invalid nonce
    """
    console.print(f"[red]✗[/red] {escape(message)}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning line with a yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {escape(message)}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print a plain informational line."""
    console.print(escape(message), **kwargs)


def print_json(data: dict[str, Any], **kwargs: Any) -> None:
    """Print a JSON document on one line.

    Example:
        >>> print_json({"class_hash": "0xabc"})
        {"class_hash": "0xabc"}
    """
    console.print_json(json.dumps(data), indent=None, **kwargs)


def set_no_color(no_color: bool) -> None:
    """Replace the module-level console to enable/disable colors."""
    global console
    console = create_console(no_color=no_color)
