"""Core / service layer — business logic and the archive pipeline.

Rules
-----
* No ``print()`` calls; all notices go through an injected ``Logger``.
* No subprocess spawning and no ``zipfile`` — those live in ``infra``.
* Filesystem access is limited to stat/readdir in ``entry_mapper``.
* No imports from ``cli`` or ``infra``.
"""

from pnpack.core.archive_pump import ArchivePump
from pnpack.core.entry_mapper import map_to_entries, relative_of
from pnpack.core.models import ArchiveEntry, CommandResult, PackRequest, PackSummary
from pnpack.core.pack_service import PackService, validate_output_path
from pnpack.core.path_resolver import PathResolver
from pnpack.core.protocols import ArchiveWriter, CommandRunner, Logger

__all__: list[str] = [
    "ArchiveEntry",
    "ArchivePump",
    "ArchiveWriter",
    "CommandResult",
    "CommandRunner",
    "Logger",
    "PackRequest",
    "PackService",
    "PackSummary",
    "PathResolver",
    "map_to_entries",
    "relative_of",
    "validate_output_path",
]
