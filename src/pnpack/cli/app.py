"""CLI application entry point and command routing for pnpack.

This module is the **sole error boundary** for the entire application.
It catches :class:`~pnpack.exceptions.PnpackError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* ``print()`` is forbidden outside the CLI layer; the Rich console proxy
  is used for all output.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pnpack.cli import exit_codes
from pnpack.cli.console import console
from pnpack.exceptions import EnvironmentError, PnpackError
from pnpack.utils import (
    DEFAULT_COMPRESSION_LEVEL,
    default_concurrency,
    package_manager_executable,
)
from pnpack.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands:
    * ``pnpack pack -p <project> -o <archive.zip>`` — build an archive
    * ``pnpack doctor``                             — environment diagnostics
    * ``pnpack --version``
    """
    parser = argparse.ArgumentParser(
        prog="pnpack",
        description=(
            "Create a ZIP archive of a pnpm workspace package and all its "
            "dependencies."
        ),
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    pack = subparsers.add_parser(
        "pack",
        help="Package a workspace project and its dependencies.",
    )
    pack.add_argument(
        "-p",
        "--project",
        required=True,
        help="Name of the workspace package to archive.",
    )
    pack.add_argument(
        "-o",
        "--output",
        required=True,
        help="Destination archive path; must end with .zip.",
    )
    pack.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=default_concurrency(),
        help="Maximum concurrent add operations (default: logical CPU count).",
    )
    pack.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every dependency path as it is added.",
    )
    pack.add_argument(
        "--compression-level",
        type=int,
        choices=range(0, 10),
        default=DEFAULT_COMPRESSION_LEVEL,
        metavar="{0-9}",
        help=f"Deflate level (default: {DEFAULT_COMPRESSION_LEVEL}).",
    )

    subparsers.add_parser("doctor", help="Check the runtime environment.")
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_pack(args: argparse.Namespace) -> int:
    """Dispatch ``pnpack pack``.

    Flow:
    1. Validate the output path (no subprocess yet).
    2. Locate the package manager executable.
    3. Wire infra adapters into :class:`PackService` and run it.
    4. Report the summary.
    """
    from pnpack.cli.console import ConsoleLogger
    from pnpack.core.models import PackRequest
    from pnpack.core.pack_service import PackService, validate_output_path
    from pnpack.infra.command_runner import AsyncSubprocessRunner
    from pnpack.infra.pm_detector import require_package_manager
    from pnpack.infra.zip_writer import ZipArchiveWriter

    request = PackRequest(
        project=args.project,
        output=Path(args.output),
        concurrency=args.concurrency,
        verbose=args.verbose,
        compression_level=args.compression_level,
    )
    output = validate_output_path(request.output)
    executable = require_package_manager(package_manager_executable())

    progress = None if args.verbose else _open_progress()
    logger = ConsoleLogger(progress.console if progress is not None else None)

    def writer_factory(path: Path, level: int) -> ZipArchiveWriter:
        return ZipArchiveWriter(path, compression_level=level, logger=logger)

    service = PackService(
        AsyncSubprocessRunner(),
        writer_factory,
        logger,
        executable=str(executable),
    )

    console.print(f"[bold]Packing[/bold] {request.project} → {output}")
    try:
        summary = asyncio.run(
            service.pack(
                request,
                progress_factory=progress.track if progress is not None else None,
            )
        )
    finally:
        if progress is not None:
            progress.stop()

    console.print(
        f"[bold green]Archive written:[/bold green] {output}  "
        f"({summary.added} entries from {summary.paths} paths, "
        f"{summary.skipped} skipped, {summary.failed} failed)"
    )
    return exit_codes.SUCCESS


def _open_progress() -> Any:
    """Start a progress bar, or return ``None`` when Rich is unavailable."""
    from pnpack.cli.progress import RichPackProgress

    try:
        progress = RichPackProgress()
    except EnvironmentError:
        return None
    progress.start()
    return progress


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from pnpack.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the pnpack CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return exit_codes.SUCCESS

    if args.command == "doctor":
        return _handle_doctor()

    return _handle_pack(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except PnpackError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
