"""Progress reporting for builders.

A builder never writes to the terminal directly. The host hands it a
:class:`UI`, the builder opens a :class:`Status` from it, pushes
in-progress text with :meth:`Status.update`, marks the outcome with
:meth:`Status.step`, and closes the status when it is done.

:class:`ConsoleUI` is the Rich-backed implementation used by the
``gobuilder`` CLI. It writes to stderr so that stdout stays reserved for
the build result.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.status import Status as RichStatus


class StepStatus(str, enum.Enum):
    """Outcome marker passed to :meth:`Status.step`."""

    OK = "ok"
    ERROR = "error"
    WARNING = "warning"


_STEP_MARKERS: dict[StepStatus, tuple[str, str]] = {
    StepStatus.OK: ("✓", "green"),
    StepStatus.WARNING: ("!", "yellow"),
    StepStatus.ERROR: ("✗", "bold red"),
}


class Status(ABC):
    """A single in-progress status line owned by one operation.

    The owner must call :meth:`close` exactly once when it is finished,
    whatever the outcome.
    """

    @abstractmethod
    def update(self, message: str) -> None:
        """Replace the in-progress text."""

    @abstractmethod
    def step(self, status: StepStatus, message: str) -> None:
        """Record a finished step with its outcome."""

    @abstractmethod
    def close(self) -> None:
        """Release the status."""


class UI(ABC):
    """Factory for :class:`Status` objects, supplied by the host."""

    @abstractmethod
    def status(self) -> Status:
        """Open a new status."""


class ConsoleStatus(Status):
    """:class:`Status` that renders to a Rich console.

    On an interactive console the in-progress text is shown next to a
    spinner; otherwise each update is printed as a plain line. Steps are
    always printed, prefixed with a coloured marker.

    Args:
        console: The console to render to.
        interactive: Whether to animate a spinner.
        quiet: Suppress updates and non-error steps.
    """

    def __init__(self, console: Console, interactive: bool, quiet: bool = False) -> None:
        self._console = console
        self._quiet = quiet
        self._spinner: Optional[RichStatus] = (
            console.status("", spinner="dots") if interactive and not quiet else None
        )
        self._started = False
        self._closed = False

    def update(self, message: str) -> None:
        if self._quiet:
            return
        if self._spinner is not None:
            self._spinner.update(escape(message))
            if not self._started:
                self._spinner.start()
                self._started = True
        else:
            self._console.print(message, markup=False, highlight=False)

    def step(self, status: StepStatus, message: str) -> None:
        if self._quiet and status != StepStatus.ERROR:
            return
        marker, style = _STEP_MARKERS[status]
        self._console.print(f"[{style}]{marker}[/{style}] {escape(message)}", highlight=False)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._spinner is not None and self._started:
            self._spinner.stop()


class ConsoleUI(UI):
    """Rich-backed :class:`UI` writing to stderr.

    Args:
        console: Console to render to. Defaults to a stderr console.
        no_color: Disable colour when creating the default console.
        quiet: Suppress in-progress text and success markers.
        interactive: Force spinner on or off. Defaults to whether the
            console is attached to a terminal.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        no_color: bool = False,
        quiet: bool = False,
        interactive: Optional[bool] = None,
    ) -> None:
        self._console = console or Console(stderr=True, no_color=no_color)
        self._quiet = quiet
        self._interactive = (
            self._console.is_terminal if interactive is None else interactive
        )

    def status(self) -> Status:
        return ConsoleStatus(self._console, self._interactive, quiet=self._quiet)
