"""Diagnostic output on stderr.

apiwire is a library, so it never writes to stdout. Everything the client
wants to report -- dispatch lines, response statuses, auth refreshes,
degraded query merges -- goes through a single :class:`OutputManager`
that renders to stderr via a Rich :class:`~rich.console.Console`.

* **Two levels** -- warnings always print; ``debug`` lines only appear in
  verbose mode (``APIWIRE_VERBOSE=1`` or ``OutputManager(verbose=True)``).
* **Colour control** -- respects ``NO_COLOR`` and ``TERM=dumb``.

Module-level :func:`get_output`, :func:`set_output` and
:func:`reset_output` manage the process-wide instance so callers do not
need to pass the manager around.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from rich.console import Console


class OutputManager:
    """Routes apiwire diagnostics to stderr.

    Args:
        verbose: Show debug messages.
        no_color: Disable Rich markup and colour.
    """

    def __init__(
        self,
        verbose: bool = False,
        no_color: bool = False,
    ) -> None:
        self._verbose = verbose
        self._no_color = no_color or _should_disable_color()
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    def warning(self, message: str) -> None:
        """Print a yellow warning. Always shown."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print("[yellow]Warning:[/yellow]", message, markup=True, highlight=False)

    def debug(self, message: str) -> None:
        """Print a debug message. Only shown in verbose mode.

        Args:
            message: The debug text (prefixed with ``[debug]`` on output).
        """
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[debug] {message}", style="dim", markup=False)


def _should_disable_color() -> bool:
    """Return True when NO_COLOR is set (any value) or TERM=dumb."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False


def _env_verbose() -> bool:
    return os.environ.get("APIWIRE_VERBOSE", "").lower() in ("1", "true", "yes", "on")


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily.

    The lazily created manager is verbose when ``APIWIRE_VERBOSE`` is set
    to a truthy value.
    """
    global _output
    if _output is None:
        _output = OutputManager(verbose=_env_verbose())
    return _output


def set_output(output: OutputManager) -> None:
    """Install *output* as the global output manager."""
    global _output
    _output = output


def reset_output() -> None:
    """Discard the global output manager so the next :func:`get_output` creates a fresh one.

    Mostly useful in tests, where stderr may be swapped out between cases.
    """
    global _output
    _output = None
