"""Rich-based progress display driven by the archive pump.

The pump calls its ``progress_callback`` with each dependency path once
that path's add operation settles.  :class:`RichPackProgress` turns those
calls into a Rich :class:`~rich.progress.Progress` bar.

Design
------
* :meth:`track` is handed to :class:`~pnpack.core.pack_service.PackService`
  as the progress factory; it creates the bar task once the path count
  is known and returns the instance itself as the callback.
* Shutdown-safe: calls after :meth:`stop` are silently ignored.
"""

from __future__ import annotations

from typing import Any

from pnpack.cli.console import get_rich_console
from pnpack.exceptions import EnvironmentError


class RichPackProgress:
    """Callable progress adapter for Rich.

    Usage::

        with RichPackProgress() as progress:
            await service.pack(request, progress_factory=progress.track)
    """

    def __init__(self) -> None:
        try:
            from rich.progress import (
                BarColumn,
                MofNCompleteColumn,
                Progress,
                SpinnerColumn,
                TextColumn,
                TimeElapsedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=get_rich_console(),
            transient=True,
        )
        self._task_id: Any = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> RichPackProgress:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    @property
    def console(self) -> Any:
        """Console that prints above the live bar without tearing it."""
        return self._progress.console

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the Rich progress display."""
        if not self._started:
            self._progress.start()
            self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Pump hooks
    # ------------------------------------------------------------------

    def track(self, total: int) -> RichPackProgress:
        """Create the bar for *total* paths and return the callback."""
        self._task_id = self._progress.add_task("Packing", total=total)
        return self

    def __call__(self, path: str) -> None:
        """Advance the bar by one settled path."""
        if not self._started or self._task_id is None:
            return
        self._progress.advance(self._task_id)
