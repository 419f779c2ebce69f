"""``zipfile`` backed implementation of :class:`~pnpack.core.protocols.ArchiveWriter`.

This module is the **only** place in the codebase that imports
``zipfile``.  The archive is assembled in a hidden temporary file next to
the output and moved into place only after it was closed and fsynced,
so an interrupted run never leaves a truncated archive at ``--output``.

Error mapping
-------------
* ``OSError`` raised for the *source* path (``exc.filename`` is the
  source) → :class:`FileAccessError` / :class:`PathMissingError`.
* any other ``OSError`` → :class:`ArchiveWriterError` (fatal).

Sources with pre-1980 timestamps are stored with the time clamped to
1980-01-01 rather than rejected.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
import zipfile
from pathlib import Path
from typing import IO

from pnpack.core.models import ArchiveEntry
from pnpack.core.protocols import Logger
from pnpack.exceptions import ArchiveWriterError, FileAccessError, PathMissingError
from pnpack.utils import DEFAULT_COMPRESSION_LEVEL


class ZipArchiveWriter:
    """Concrete :class:`ArchiveWriter` writing a deflated ZIP file.

    All mutation of the underlying :class:`zipfile.ZipFile` happens under
    one :class:`asyncio.Lock`, and the blocking work runs in a worker
    thread, so concurrent :meth:`add` calls are serialized here.

    Parameters
    ----------
    output:
        Final archive path.  Its parent directory must exist.
    compression_level:
        zlib level (0-9) for ``ZIP_DEFLATED``.
    logger:
        Optional sink for benign notices such as duplicate names.
    """

    def __init__(
        self,
        output: Path,
        *,
        compression_level: int = DEFAULT_COMPRESSION_LEVEL,
        logger: Logger | None = None,
    ) -> None:
        self._output: Path = output
        self._compression_level: int = compression_level
        self._logger: Logger | None = logger
        self._lock = asyncio.Lock()
        self._names: set[str] = set()
        self._file: IO[bytes] | None = None
        self._zip: zipfile.ZipFile | None = None
        self._temp_path: Path | None = None
        self._done: bool = False

    @property
    def names(self) -> frozenset[str]:
        """Archive names written so far."""
        return frozenset(self._names)

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    async def add(self, entry: ArchiveEntry) -> bool:
        """Append *entry*; duplicates are ignored with a warning."""
        async with self._lock:
            if entry.archive_name in self._names:
                if self._logger is not None:
                    self._logger.warn(
                        f"Duplicate archive name {entry.archive_name}; "
                        f"ignoring {entry.source_path}"
                    )
                return False
            await asyncio.to_thread(self._write_entry, entry)
            self._names.add(entry.archive_name)
            return True

    async def finalize(self) -> None:
        """Close, fsync and move the archive to its output path."""
        async with self._lock:
            await asyncio.to_thread(self._finalize)

    async def abort(self) -> None:
        """Close and delete the temporary archive (idempotent)."""
        async with self._lock:
            await asyncio.to_thread(self._discard)

    # ------------------------------------------------------------------
    # Blocking helpers (worker thread)
    # ------------------------------------------------------------------

    def _open(self) -> zipfile.ZipFile:
        if self._done:
            raise ArchiveWriterError(f"Archive {self._output} is already closed.")
        if self._zip is not None:
            return self._zip

        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{self._output.name}.",
                suffix=".partial",
                dir=self._output.parent,
            )
            self._temp_path = Path(temp_name)
            self._file = os.fdopen(fd, "w+b")
            self._zip = zipfile.ZipFile(
                self._file,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self._compression_level,
                strict_timestamps=False,
            )
        except OSError as exc:
            self._discard()
            raise ArchiveWriterError(
                f"Cannot create archive in {self._output.parent}: {exc}",
            ) from exc
        return self._zip

    def _write_entry(self, entry: ArchiveEntry) -> None:
        archive = self._open()
        try:
            archive.write(entry.source_path, arcname=entry.archive_name)
        except FileNotFoundError as exc:
            if exc.filename != entry.source_path:
                raise ArchiveWriterError(f"Failed writing {self._output}: {exc}") from exc
            raise PathMissingError(
                f"{entry.source_path} no longer exists.",
                path=entry.source_path,
            ) from exc
        except OSError as exc:
            if exc.filename != entry.source_path:
                raise ArchiveWriterError(f"Failed writing {self._output}: {exc}") from exc
            raise FileAccessError(
                f"Cannot read {entry.source_path}: {exc.strerror or exc}",
                path=entry.source_path,
            ) from exc

    def _finalize(self) -> None:
        archive = self._open()
        file, temp_path = self._file, self._temp_path
        if file is None or temp_path is None:
            raise ArchiveWriterError(f"Archive {self._output} was never opened.")
        try:
            archive.close()
            file.flush()
            os.fsync(file.fileno())
            file.close()
            os.chmod(temp_path, 0o666 & ~_current_umask())
            os.replace(temp_path, self._output)
        except OSError as exc:
            self._discard()
            raise ArchiveWriterError(
                f"Failed to finalize {self._output}: {exc}",
                hint="Check free disk space and write permissions.",
            ) from exc
        self._done = True
        self._zip = None
        self._file = None
        self._temp_path = None

    def _discard(self) -> None:
        # Cleanup after a failure: the original error is already propagating.
        if self._zip is not None:
            with contextlib.suppress(OSError, ValueError):
                self._zip.close()
        if self._file is not None:
            with contextlib.suppress(OSError):
                self._file.close()
        if self._temp_path is not None:
            with contextlib.suppress(FileNotFoundError):
                self._temp_path.unlink()
        self._zip = None
        self._file = None
        self._temp_path = None
        self._done = True


def _current_umask() -> int:
    # mkstemp files are 0600; match what open() would have created.
    mask = os.umask(0)
    os.umask(mask)
    return mask
