"""Bounded-concurrency archive pump.

Drives :func:`~pnpack.core.entry_mapper.map_to_entries` and the archive
writer over a dependency path list with at most ``concurrency`` path
operations in flight.  When the ceiling is reached, dispatch waits for
the *first* in-flight operation to settle, whichever it is.

Error policy
------------
* :class:`~pnpack.exceptions.PathMissingError` — logged as a skip.
* :class:`~pnpack.exceptions.FileAccessError` and any other per-path
  failure — logged as an error, the entry is omitted.
* :class:`~pnpack.exceptions.ArchiveWriterError` — fatal: dispatch stops,
  in-flight work drains, the writer is aborted and the error re-raised.

The archive is finalized only after every dispatched operation settled.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from pnpack.core.entry_mapper import map_to_entries
from pnpack.core.models import ArchiveEntry, PackSummary
from pnpack.core.protocols import ArchiveWriter, Logger, ProgressCallback
from pnpack.exceptions import (
    ArchiveWriterError,
    FileAccessError,
    PathMissingError,
    ValidationError,
)


class _Tally:
    """Mutable counters shared by the tasks of one run."""

    __slots__ = ("added", "failed", "paths", "skipped")

    def __init__(self) -> None:
        self.paths = 0
        self.added = 0
        self.skipped = 0
        self.failed = 0

    def freeze(self) -> PackSummary:
        return PackSummary(
            paths=self.paths,
            added=self.added,
            skipped=self.skipped,
            failed=self.failed,
        )


class ArchivePump:
    """Stream dependency paths into an archive writer.

    Parameters
    ----------
    writer:
        Any object satisfying the :class:`ArchiveWriter` protocol.
    concurrency:
        Maximum number of path operations in flight (``>= 1``).
    logger:
        Sink for skip / failure / progress notices.
    verbose:
        When set, log ``Adding <path>`` before each path is processed.
    progress_callback:
        Optional callable invoked with each path once it settles.
    """

    def __init__(
        self,
        writer: ArchiveWriter,
        *,
        concurrency: int,
        logger: Logger,
        verbose: bool = False,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValidationError(
                f"Concurrency must be at least 1, got {concurrency}.",
                hint="Pass --concurrency with a positive integer.",
            )
        self._writer: ArchiveWriter = writer
        self._concurrency: int = concurrency
        self._logger: Logger = logger
        self._verbose: bool = verbose
        self._progress_callback: ProgressCallback | None = progress_callback
        self.peak_in_flight: int = 0
        """Highest number of simultaneously running operations seen."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(self, paths: Iterable[str], workspace_root: str) -> PackSummary:
        """Archive every path and finalize the writer.

        Returns once the archive has been flushed to its final location.

        Raises
        ------
        ArchiveWriterError
            If the writer fails fatally; the partial archive is discarded.
        """
        tally = _Tally()
        fatal: list[ArchiveWriterError] = []
        in_flight: set[asyncio.Task[None]] = set()
        finalized = False

        try:
            for path in paths:
                while len(in_flight) >= self._concurrency:
                    done, _pending = await asyncio.wait(
                        in_flight,
                        return_when=asyncio.FIRST_COMPLETED,
                    )
                    in_flight.difference_update(done)
                if fatal:
                    break

                task = asyncio.create_task(
                    self._pack_path(path, workspace_root, tally, fatal),
                )
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
                tally.paths += 1
                self.peak_in_flight = max(self.peak_in_flight, len(in_flight))

            if in_flight:
                await asyncio.wait(in_flight)

            if fatal:
                raise fatal[0]

            await self._writer.finalize()
            finalized = True
        finally:
            if not finalized:
                for task in in_flight:
                    task.cancel()
                await asyncio.gather(*in_flight, return_exceptions=True)
                await self._writer.abort()

        return tally.freeze()

    # ------------------------------------------------------------------
    # One logical operation per path
    # ------------------------------------------------------------------

    async def _pack_path(
        self,
        path: str,
        workspace_root: str,
        tally: _Tally,
        fatal: list[ArchiveWriterError],
    ) -> None:
        try:
            if self._verbose:
                self._logger.info(f"Adding {path}")
            entries = await asyncio.to_thread(map_to_entries, path, workspace_root)
            for entry in entries:
                if fatal:
                    return
                await self._add_entry(entry, tally)
        except PathMissingError:
            tally.skipped += 1
            self._logger.warn(f"Skipped {path}: path no longer exists.")
        except FileAccessError as exc:
            tally.failed += 1
            self._logger.error(f"Failed {path}: {exc}")
        except ArchiveWriterError as exc:
            fatal.append(exc)
        except Exception as exc:  # noqa: BLE001
            tally.failed += 1
            self._logger.error(f"Failed {path}: {type(exc).__name__}: {exc}")
        finally:
            if self._progress_callback is not None:
                self._progress_callback(path)

    async def _add_entry(self, entry: ArchiveEntry, tally: _Tally) -> None:
        """Add one entry; source-side errors only cost that entry."""
        try:
            if await self._writer.add(entry):
                tally.added += 1
        except PathMissingError:
            tally.skipped += 1
            self._logger.warn(f"Skipped {entry.source_path}: path no longer exists.")
        except FileAccessError as exc:
            tally.failed += 1
            self._logger.error(f"Failed {entry.source_path}: {exc}")
