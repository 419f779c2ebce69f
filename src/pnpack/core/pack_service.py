"""Core pack service — orchestrates validation, resolution and archiving.

This is the central service consumed by the CLI layer.  Its
collaborators (command runner, writer factory, logger) are injected at
construction time, keeping the core free of subprocess and ``zipfile``
imports.

Order of work for :meth:`PackService.pack`
------------------------------------------
1. Validate the output path (extension, parent directory).
2. Confirm the project is a workspace member.
3. Resolve the workspace root and the dependency path list.
4. Open the writer and run the :class:`ArchivePump`.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from pnpack.core.archive_pump import ArchivePump
from pnpack.core.models import PackRequest, PackSummary
from pnpack.core.path_resolver import PathResolver
from pnpack.core.protocols import ArchiveWriter, CommandRunner, Logger, ProgressCallback
from pnpack.exceptions import InvalidOutputPathError, ProjectNotFoundError, ValidationError
from pnpack.utils import ARCHIVE_EXTENSION, DEFAULT_PACKAGE_MANAGER

WriterFactory = Callable[[Path, int], ArchiveWriter]
"""Builds a writer from ``(output_path, compression_level)``."""

ProgressFactory = Callable[[int], ProgressCallback | None]
"""Builds a progress callback once the number of paths is known."""


def validate_output_path(output: Path) -> Path:
    """Check *output* and return it as an absolute path.

    Raises
    ------
    InvalidOutputPathError
        If the extension is not ``.zip`` or the parent directory is missing.
    """
    if output.suffix.lower() != ARCHIVE_EXTENSION:
        raise InvalidOutputPathError(
            f"Output path must end with {ARCHIVE_EXTENSION}: {output}",
            hint=f"Try: --output {output.with_suffix(ARCHIVE_EXTENSION)}",
        )

    resolved = output.expanduser().resolve()
    if not resolved.parent.is_dir():
        raise InvalidOutputPathError(
            f"Output directory does not exist: {resolved.parent}",
            hint="Create the directory first or choose another --output.",
        )
    return resolved


class PackService:
    """Package one workspace project into a ZIP archive.

    Parameters
    ----------
    runner:
        Command runner used for every package manager query.
    writer_factory:
        Callable returning a fresh :class:`ArchiveWriter` for the output.
    logger:
        Sink for run notices.
    executable:
        Package manager executable name.
    """

    def __init__(
        self,
        runner: CommandRunner,
        writer_factory: WriterFactory,
        logger: Logger,
        *,
        executable: str = DEFAULT_PACKAGE_MANAGER,
    ) -> None:
        self._resolver = PathResolver(runner, executable)
        self._writer_factory = writer_factory
        self._logger = logger

    async def pack(
        self,
        request: PackRequest,
        *,
        progress_factory: ProgressFactory | None = None,
    ) -> PackSummary:
        """Run the full pipeline for *request*.

        Raises
        ------
        InvalidOutputPathError
            Before any subprocess is spawned.
        ProjectNotFoundError
            If the workspace does not list the project.
        SubprocessError
            If a package manager query fails.
        ArchiveWriterError
            If the archive cannot be written.
        """
        output = validate_output_path(request.output)
        if request.concurrency < 1:
            raise ValidationError(
                f"Concurrency must be at least 1, got {request.concurrency}.",
                hint="Pass --concurrency with a positive integer.",
            )

        if not await self._resolver.project_exists(request.project):
            raise ProjectNotFoundError(
                f"Project '{request.project}' was not found in the workspace.",
                hint="Check the name against 'pnpm list --recursive --depth -1'.",
            )

        workspace_root = await self._resolver.resolve_workspace_root()
        paths = await self._resolver.resolve_dependency_paths(request.project)
        self._logger.info(
            f"Resolved {len(paths)} dependency paths for {request.project} "
            f"under {workspace_root}"
        )

        progress = progress_factory(len(paths)) if progress_factory is not None else None
        writer = self._writer_factory(output, request.compression_level)
        pump = ArchivePump(
            writer,
            concurrency=request.concurrency,
            logger=self._logger,
            verbose=request.verbose,
            progress_callback=progress,
        )
        return await pump.run(paths, workspace_root)
