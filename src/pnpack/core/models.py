"""Domain models for pnpack.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O and no dependencies on
external packages.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pnpack.utils import DEFAULT_COMPRESSION_LEVEL


# ---------------------------------------------------------------------------
# Package manager invocation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of one external command."""

    exit_code: int
    """Process return code."""

    stdout: str
    """Decoded standard output."""

    stderr: str
    """Decoded standard error."""


# ---------------------------------------------------------------------------
# Archive entry
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """One ``(source, name)`` pair submitted to the archive writer."""

    source_path: str
    """Absolute filesystem path the entry is read from."""

    archive_name: str
    """POSIX-style name inside the archive, relative to the workspace root."""


# ---------------------------------------------------------------------------
# Run request / result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PackRequest:
    """Everything one ``pnpack pack`` invocation needs."""

    project: str
    output: Path
    concurrency: int
    verbose: bool = False
    compression_level: int = DEFAULT_COMPRESSION_LEVEL


@dataclass(frozen=True, slots=True)
class PackSummary:
    """Counters reported once the archive has been finalized."""

    paths: int
    """Number of dependency paths dispatched."""

    added: int
    """Archive entries written."""

    skipped: int
    """Paths that no longer existed on disk."""

    failed: int
    """Paths or entries omitted because of an access error."""

    @property
    def ok(self) -> bool:
        return self.failed == 0
