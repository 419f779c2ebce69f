"""asyncio subprocess implementation of :class:`~pnpack.core.protocols.CommandRunner`.

This module is the **only** place in the codebase that spawns processes.
A missing executable is re-raised as
:class:`~pnpack.exceptions.PackageManagerNotFoundError`; every other
``OSError`` from spawning becomes a :class:`~pnpack.exceptions.SubprocessError`.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

from pnpack.core.models import CommandResult
from pnpack.exceptions import PackageManagerNotFoundError, SubprocessError


class AsyncSubprocessRunner:
    """Concrete :class:`CommandRunner` backed by ``asyncio`` subprocesses.

    Parameters
    ----------
    cwd:
        Working directory for every command.  ``None`` inherits the
        current directory, which is where pnpm looks for the workspace.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        self._cwd: Path | None = cwd

    async def execute(self, argv: Sequence[str]) -> CommandResult:
        """Run *argv* and capture stdout / stderr as UTF-8 text."""
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._cwd,
            )
        except FileNotFoundError as exc:
            raise PackageManagerNotFoundError(
                f"'{argv[0]}' is not installed or not on PATH.",
                hint="Run 'pnpack doctor' for install instructions.",
            ) from exc
        except OSError as exc:
            raise SubprocessError(
                f"Could not start '{' '.join(argv)}': {exc}",
                argv=argv,
            ) from exc

        stdout, stderr = await process.communicate()
        return CommandResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
