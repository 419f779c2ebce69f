"""Shared utilities — constants, defaults, and cross-cutting helpers.

Rules
-----
* No business logic.
* No I/O beyond reading the process environment.
* Importable by any layer.
"""

from __future__ import annotations

import os

ARCHIVE_EXTENSION: str = ".zip"
"""Canonical extension every ``--output`` path must carry."""

DEFAULT_PACKAGE_MANAGER: str = "pnpm"
"""Executable used to query the workspace."""

PACKAGE_MANAGER_ENV_VAR: str = "PNPACK_PACKAGE_MANAGER"
"""Environment variable overriding :data:`DEFAULT_PACKAGE_MANAGER`."""

DEPENDENCY_DEPTH: str = "Infinity"
"""Value passed to ``pnpm ls --depth`` for the full transitive closure."""

DEFAULT_COMPRESSION_LEVEL: int = 9
"""zlib level used for ``ZIP_DEFLATED`` entries."""


def default_concurrency() -> int:
    """Return the host's logical core count (at least 1)."""
    return os.cpu_count() or 1


def package_manager_executable() -> str:
    """Return the package manager executable, honouring the env override."""
    override = os.environ.get(PACKAGE_MANAGER_ENV_VAR, "").strip()
    return override or DEFAULT_PACKAGE_MANAGER


__all__: list[str] = [
    "ARCHIVE_EXTENSION",
    "DEFAULT_COMPRESSION_LEVEL",
    "DEFAULT_PACKAGE_MANAGER",
    "DEPENDENCY_DEPTH",
    "PACKAGE_MANAGER_ENV_VAR",
    "default_concurrency",
    "package_manager_executable",
]
