"""Infrastructure: package manager detection and platform guidance.

Locates the package manager executable (``pnpm`` unless overridden) on
the system PATH and provides platform-specific installation guidance
when it is missing.

Rules
-----
* Detection via :func:`shutil.which` only — no subprocess.
* No automatic installation.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from pnpack.exceptions import PackageManagerNotFoundError
from pnpack.utils import DEFAULT_PACKAGE_MANAGER


# ---------------------------------------------------------------------------
# Detection result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PackageManagerStatus:
    """Result of a package manager detection probe.

    Attributes
    ----------
    name : str
        Executable that was searched for.
    found : bool
        Whether the executable was located on PATH.
    path : Path | None
        Absolute path to the executable, or ``None``.
    install_commands : tuple[str, ...]
        Suggested shell commands for installing pnpm on the current
        platform.  Empty when the executable is already present.
    """

    name: str
    found: bool
    path: Path | None
    install_commands: tuple[str, ...]


# ---------------------------------------------------------------------------
# Detection logic
# ---------------------------------------------------------------------------

def detect_package_manager(name: str = DEFAULT_PACKAGE_MANAGER) -> PackageManagerStatus:
    """Probe the system for *name*.

    Returns a :class:`PackageManagerStatus` regardless of whether the
    executable is present — the caller decides whether to abort or warn.
    """
    result = shutil.which(name)

    if result is not None:
        return PackageManagerStatus(
            name=name,
            found=True,
            path=Path(result),
            install_commands=(),
        )

    return PackageManagerStatus(
        name=name,
        found=False,
        path=None,
        install_commands=_platform_install_commands(),
    )


def require_package_manager(name: str = DEFAULT_PACKAGE_MANAGER) -> Path:
    """Locate *name* or raise :class:`PackageManagerNotFoundError`.

    The returned path is what gets spawned, so ``pnpm.cmd`` shims on
    Windows resolve correctly.
    """
    status = detect_package_manager(name)
    if not status.found or status.path is None:
        hint_lines: list[str] = []
        if status.install_commands:
            hint_lines.append("Install pnpm using one of:")
            hint_lines.extend(f"  {cmd}" for cmd in status.install_commands)
        raise PackageManagerNotFoundError(
            f"{name} is not installed or not on PATH.",
            hint="\n".join(hint_lines) if hint_lines else None,
        )
    return status.path


# ---------------------------------------------------------------------------
# Platform-specific install guidance
# ---------------------------------------------------------------------------

def _platform_install_commands() -> tuple[str, ...]:
    """Return install commands appropriate for the current OS."""
    system = platform.system().lower()
    if system == "windows":
        return (
            "winget install -e --id pnpm.pnpm",
            "corepack enable pnpm",
        )
    if system == "darwin":
        return (
            "brew install pnpm",
            "corepack enable pnpm",
        )
    if system == "linux":
        return (
            "corepack enable pnpm",
            "npm install -g pnpm",
        )
    return ("See https://pnpm.io/installation",)
