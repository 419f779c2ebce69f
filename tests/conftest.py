"""Shared pytest fixtures and configuration for the pnpack test suite.

Guidelines
----------
* No real pnpm — the command runner is replaced by :class:`FakeRunner`.
* Filesystem work happens under ``tmp_path`` only.
* Async code is driven with ``asyncio.run`` from plain test functions.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from pnpack.core.models import ArchiveEntry, CommandResult
from pnpack.exceptions import ArchiveWriterError, FileAccessError


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeRunner:
    """In-memory :class:`CommandRunner` keyed by the arguments after argv[0]."""

    def __init__(self, responses: dict[tuple[str, ...], CommandResult] | None = None) -> None:
        self.responses: dict[tuple[str, ...], CommandResult] = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    async def execute(self, argv: Sequence[str]) -> CommandResult:
        self.calls.append(tuple(argv))
        return self.responses.get(
            tuple(argv[1:]),
            CommandResult(exit_code=1, stdout="", stderr="unknown command"),
        )


@dataclass
class RecordingLogger:
    """Logger that keeps every message for assertions."""

    infos: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


class FakeWriter:
    """Archive writer that records entries and measures concurrent adds."""

    def __init__(
        self,
        *,
        delay: float = 0.0,
        unreadable: frozenset[str] = frozenset(),
        fatal_on: str | None = None,
    ) -> None:
        self.delay = delay
        self.unreadable = unreadable
        self.fatal_on = fatal_on
        self.entries: list[ArchiveEntry] = []
        self.active = 0
        self.peak = 0
        self.finalized = False
        self.aborted = False

    async def add(self, entry: ArchiveEntry) -> bool:
        if entry.archive_name == self.fatal_on:
            raise ArchiveWriterError("disk full")
        if entry.archive_name in self.unreadable:
            raise FileAccessError("permission denied", path=entry.source_path)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active -= 1
        self.entries.append(entry)
        return True

    async def finalize(self) -> None:
        self.finalized = True

    async def abort(self) -> None:
        self.aborted = True

    @property
    def names(self) -> set[str]:
        return {entry.archive_name for entry in self.entries}


# ---------------------------------------------------------------------------
# Workspace builder
# ---------------------------------------------------------------------------

@dataclass
class Workspace:
    """A small on-disk pnpm-like workspace."""

    root: Path
    project: Path
    lodash: Path

    def ls_output(self, *extra: str) -> str:
        """Build ``pnpm ls --parseable`` output: header line, then paths."""
        lines = [str(self.project), str(self.project), str(self.lodash), *extra]
        return "\n".join(lines) + "\n"


def build_workspace(base: Path) -> Workspace:
    root = base / "ws"
    project = root / "my-package"
    (project / "src").mkdir(parents=True)
    (project / "package.json").write_text('{"name": "my-package"}')
    (project / "index.js").write_text("module.exports = 1;\n")
    (project / "src" / "util.js").write_text("exports.x = 2;\n")

    lodash = root / "node_modules" / ".pnpm" / "lodash@4.17.21" / "node_modules" / "lodash"
    lodash.mkdir(parents=True)
    (lodash / "package.json").write_text('{"name": "lodash"}')
    (lodash / "lodash.js").write_text("module.exports = {};\n")
    return Workspace(root=root, project=project, lodash=lodash)


def pnpm_responses(
    workspace: Workspace,
    project: str = "my-package",
    *extra_paths: str,
) -> dict[tuple[str, ...], CommandResult]:
    """Canned pnpm answers for *workspace*."""
    return {
        ("list", "--filter", project): CommandResult(
            0,
            f"Legend: production dependency, optional only, dev only\n\n"
            f"{project}@1.0.0 {workspace.project} (PRIVATE)\n\n"
            "dependencies:\nlodash 4.17.21\n",
            "",
        ),
        ("root", "-w"): CommandResult(0, f"{workspace.root / 'node_modules'}\n", ""),
        ("ls", "--filter", project, "--depth", "Infinity", "--parseable"): CommandResult(
            0, workspace.ls_output(*extra_paths), "",
        ),
    }


@pytest.fixture()
def workspace(tmp_path: Path) -> Workspace:
    return build_workspace(tmp_path)


@pytest.fixture()
def logger() -> RecordingLogger:
    return RecordingLogger()
