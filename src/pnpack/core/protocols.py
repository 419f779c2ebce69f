"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and the CLI must
satisfy.  Core code depends ONLY on these protocols — never on concrete
implementations — so every seam can be replaced by an in-memory fake in
tests.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from pnpack.core.models import ArchiveEntry, CommandResult


class CommandRunner(Protocol):
    """Contract for running an external command and capturing its output.

    Any object that implements :meth:`execute` with the correct signature
    satisfies this protocol structurally.
    """

    async def execute(self, argv: Sequence[str]) -> CommandResult:
        """Run *argv* to completion and return its captured output.

        A non-zero exit code is **not** an error at this level — callers
        inspect :attr:`CommandResult.exit_code` themselves.

        Raises
        ------
        PackageManagerNotFoundError
            When ``argv[0]`` cannot be executed at all.
        """
        ...  # pragma: no cover


class ArchiveWriter(Protocol):
    """Contract for the archive container writer.

    The writer owns the output file and serializes every physical write;
    :meth:`add` may be awaited from several tasks at once.
    """

    async def add(self, entry: ArchiveEntry) -> bool:
        """Append *entry* to the archive.

        Returns ``False`` when the entry was ignored with a warning
        (e.g. duplicate name), ``True`` otherwise.

        Raises
        ------
        FileAccessError
            When the source cannot be read.  Recoverable.
        ArchiveWriterError
            When the destination cannot be written.  Fatal.
        """
        ...  # pragma: no cover

    async def finalize(self) -> None:
        """Close the archive and flush it durably to its final path."""
        ...  # pragma: no cover

    async def abort(self) -> None:
        """Discard everything written so far (idempotent)."""
        ...  # pragma: no cover


class Logger(Protocol):
    """Leveled message sink used by core services."""

    def info(self, message: str) -> None: ...  # pragma: no cover

    def warn(self, message: str) -> None: ...  # pragma: no cover

    def error(self, message: str) -> None: ...  # pragma: no cover


ProgressCallback = Callable[[str], None]
"""Invoked with each dependency path once its add operation settles."""
