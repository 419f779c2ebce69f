"""Workspace queries against the package manager.

The resolver depends on a :class:`~pnpack.core.protocols.CommandRunner`
injected at construction time; it never spawns processes itself.  The
parsing rules live in pure module-level functions so they can be tested
without any runner at all.

Queries
-------
* ``pnpm list --filter <name>``                          — project existence
* ``pnpm root -w``                                       — workspace root
* ``pnpm ls --filter <name> --depth Infinity --parseable`` — dependency paths
"""

from __future__ import annotations

import ntpath
import posixpath
import re
from collections.abc import Sequence

from pnpack.core.models import CommandResult
from pnpack.core.protocols import CommandRunner
from pnpack.exceptions import SubprocessError
from pnpack.utils import DEFAULT_PACKAGE_MANAGER, DEPENDENCY_DEPTH

_NODE_MODULES = "node_modules"


# ---------------------------------------------------------------------------
# Output parsers (pure)
# ---------------------------------------------------------------------------

def project_listed(output: str, name: str) -> bool:
    """Return ``True`` when a line of *output* starts with ``name@``.

    The match is anchored at the line start, so ``my-package`` does not
    match ``other-my-package@1.0.0`` or ``my-package-extra@1.0.0``.
    """
    pattern = re.compile(rf"^{re.escape(name)}@", re.MULTILINE)
    return pattern.search(output) is not None


def parse_dependency_paths(output: str) -> tuple[str, ...]:
    """Parse ``ls --parseable`` output into a deduplicated path tuple.

    The first line is the listing's self entry and is discarded.  Blank
    lines are ignored, and a path seen twice is kept once at its first
    position.
    """
    lines = output.splitlines()[1:]
    seen: set[str] = set()
    paths: list[str] = []
    for line in lines:
        path = line.strip()
        if path and path not in seen:
            seen.add(path)
            paths.append(path)
    return tuple(paths)


def workspace_root_from(output: str) -> str:
    """Extract the workspace root from ``pnpm root`` output.

    ``pnpm root -w`` reports ``<workspace>/node_modules`` from any member
    directory; the trailing ``node_modules`` component is dropped so entry
    names start at the workspace directory.
    """
    root = output.strip()
    path_module = ntpath if "\\" in root else posixpath
    trimmed = root.rstrip("/\\")
    if path_module.basename(trimmed) == _NODE_MODULES:
        return path_module.dirname(trimmed)
    return root


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class PathResolver:
    """Ask the package manager about a workspace project.

    Parameters
    ----------
    runner:
        Any object satisfying the :class:`CommandRunner` protocol.
    executable:
        Package manager executable name (``pnpm`` by default).
    """

    def __init__(
        self,
        runner: CommandRunner,
        executable: str = DEFAULT_PACKAGE_MANAGER,
    ) -> None:
        self._runner: CommandRunner = runner
        self._executable: str = executable

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def project_exists(self, name: str) -> bool:
        """Return whether *name* is a member of the workspace.

        Raises
        ------
        SubprocessError
            If the ``list`` query exits non-zero or writes to stderr.
        """
        result = await self._run("list", "--filter", name)
        return project_listed(result.stdout, name)

    async def resolve_workspace_root(self) -> str:
        """Return the absolute workspace root directory.

        Raises
        ------
        SubprocessError
            If the ``root`` query exits non-zero or writes to stderr.
        """
        result = await self._run("root", "-w")
        root = workspace_root_from(result.stdout)
        if not root:
            raise SubprocessError(
                f"'{self._executable} root' printed no workspace path.",
                argv=(self._executable, "root", "-w"),
                exit_code=result.exit_code,
            )
        return root

    async def resolve_dependency_paths(self, name: str) -> tuple[str, ...]:
        """Return every absolute path in *name*'s dependency closure.

        Raises
        ------
        SubprocessError
            If the ``ls`` query exits non-zero or writes to stderr.
        """
        result = await self._run(
            "ls",
            "--filter",
            name,
            "--depth",
            DEPENDENCY_DEPTH,
            "--parseable",
        )
        return parse_dependency_paths(result.stdout)

    # ------------------------------------------------------------------
    # Runner delegation (safe boundary)
    # ------------------------------------------------------------------

    async def _run(self, *args: str) -> CommandResult:
        argv: Sequence[str] = (self._executable, *args)
        result = await self._runner.execute(argv)
        command = " ".join(argv)

        if result.exit_code != 0:
            raise SubprocessError(
                f"'{command}' exited with code {result.exit_code}.",
                argv=argv,
                exit_code=result.exit_code,
                stderr=result.stderr,
                hint=result.stderr.strip() or None,
            )
        if result.stderr.strip():
            raise SubprocessError(
                f"'{command}' reported an error.",
                argv=argv,
                exit_code=result.exit_code,
                stderr=result.stderr,
                hint=result.stderr.strip(),
            )
        return result
