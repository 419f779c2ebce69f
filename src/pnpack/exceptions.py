"""Custom exception hierarchy for pnpack.

All exceptions that cross layer boundaries must inherit from
:class:`PnpackError`.  Raw ``OSError`` / subprocess failures must NEVER
propagate beyond the infrastructure layer — they are caught there and
re-raised as a typed subclass defined here.

Hierarchy
---------
PnpackError
├── SubprocessError
├── ValidationError
│   ├── ProjectNotFoundError
│   └── InvalidOutputPathError
├── FileAccessError
│   └── PathMissingError
├── ArchiveWriterError
└── EnvironmentError
    └── PackageManagerNotFoundError

Only ``FileAccessError`` is recoverable: the archive pump logs it and
moves on to the next path.  Everything else aborts the run.
"""

from __future__ import annotations

from collections.abc import Sequence


class PnpackError(Exception):
    """Base exception for all pnpack errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Package manager subprocess --------------------------------------------

class SubprocessError(PnpackError):
    """Raised when the package manager exits non-zero or writes to stderr."""

    def __init__(
        self,
        message: str,
        *,
        argv: Sequence[str] = (),
        exit_code: int | None = None,
        stderr: str = "",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.argv: tuple[str, ...] = tuple(argv)
        self.exit_code: int | None = exit_code
        self.stderr: str = stderr


# --- Input validation -------------------------------------------------------

class ValidationError(PnpackError):
    """Raised when CLI input is rejected before any archive work starts."""


class ProjectNotFoundError(ValidationError):
    """Raised when the target project is not a member of the workspace."""


class InvalidOutputPathError(ValidationError):
    """Raised for a wrong archive extension or a missing output directory."""


# --- Per-entry filesystem access -------------------------------------------

class FileAccessError(PnpackError):
    """Raised when a single dependency path cannot be read.

    Recoverable: the archive pump logs the failure and omits the entry.
    """

    def __init__(self, message: str, *, path: str = "", hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.path: str = path


class PathMissingError(FileAccessError):
    """Raised when a resolved path no longer exists on disk."""


# --- Archive writer ---------------------------------------------------------

class ArchiveWriterError(PnpackError):
    """Raised when the archive writer itself fails (e.g. disk full)."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(PnpackError):
    """Raised when a required runtime dependency is not available."""


class PackageManagerNotFoundError(EnvironmentError):
    """Raised when the package manager executable is not on PATH."""
