"""Infrastructure layer — external system integration.

This layer wraps all interaction with the package manager process, the
ZIP container format, and the operating system.  Every raw ``OSError``
must be caught here and re-raised as a
:class:`~pnpack.exceptions.PnpackError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from pnpack.infra.command_runner import AsyncSubprocessRunner
from pnpack.infra.pm_detector import (
    PackageManagerStatus,
    detect_package_manager,
    require_package_manager,
)
from pnpack.infra.zip_writer import ZipArchiveWriter

__all__: list[str] = [
    "AsyncSubprocessRunner",
    "PackageManagerStatus",
    "ZipArchiveWriter",
    "detect_package_manager",
    "require_package_manager",
]
