"""``pnpack doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment can build archives.

This module lives in the CLI layer — it may import from ``infra``
and renders via Rich.  It purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys
from importlib.metadata import PackageNotFoundError, version

from pnpack.cli import exit_codes
from pnpack.cli.console import console
from pnpack.infra.pm_detector import PackageManagerStatus, detect_package_manager
from pnpack.utils import package_manager_executable
from pnpack.version import __version__


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Python version row."""
    py_version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", py_version, status


def _rich_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the Rich row."""
    try:
        import rich  # noqa: F401
    except ImportError:
        return "rich", "NOT INSTALLED", "[yellow]WARN[/yellow]"

    try:
        return "rich", version("rich"), "[green]OK[/green]"
    except PackageNotFoundError:
        return "rich", "unknown", "[green]OK[/green]"


def _package_manager_check(status_obj: PackageManagerStatus) -> tuple[str, str, str]:
    """Return (label, value, status) for the package manager row."""
    if status_obj.found:
        path_str = str(status_obj.path) if status_obj.path else "found"
        return status_obj.name, path_str, "[green]OK[/green]"
    return status_obj.name, "not found", "[red]FAIL[/red]"


def _os_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _pnpack_version_check() -> tuple[str, str, str]:
    """Return (label, value, status) for the pnpack version row."""
    return "pnpack", __version__, "[green]OK[/green]"


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[tuple[str, str, str]]) -> None:
    """Render doctor output without Rich."""
    print("\npnpack doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<32} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor() -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check failed,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    pm_status = detect_package_manager(package_manager_executable())
    checks = [
        _pnpack_version_check(),
        _python_version_check(),
        _rich_check(),
        _package_manager_check(pm_status),
        _os_check(),
    ]
    has_failure = any("FAIL" in status for _, _, status in checks)

    rich_available = True
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        rich_available = False

    if rich_available:
        table = Table(
            title="pnpack doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()
    else:
        _print_plain_doctor_table(checks)

    if not pm_status.found and pm_status.install_commands:
        console.print(f"[yellow]{pm_status.name} is not installed.[/yellow]")
        console.print("Install using one of the following commands:\n")
        for cmd in pm_status.install_commands:
            console.print(f"  [bold]{cmd}[/bold]")
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
