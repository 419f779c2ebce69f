"""Map dependency paths to archive entries.

A resolved path becomes zero or more :class:`ArchiveEntry` pairs:

* file       → one entry named after its workspace-relative path;
* directory  → one entry per **immediate** child, in name order (nested
  directories appear as their own lines in the resolver output, so there
  is no recursive walk here);
* missing    → :class:`~pnpack.exceptions.PathMissingError`.

The functions here are synchronous; the archive pump runs them in a
worker thread.
"""

from __future__ import annotations

import os
import stat

from pnpack.core.models import ArchiveEntry
from pnpack.exceptions import FileAccessError, PathMissingError

_SEPARATORS = "/\\" if os.sep == "\\" else "/"


def relative_of(path: str, workspace_root: str) -> str:
    """Return *path* relative to *workspace_root* as a POSIX archive name.

    The root prefix and the separator following it are stripped.  The
    result never starts with a separator and never contains ``..``.

    Raises
    ------
    FileAccessError
        If *path* is not strictly below *workspace_root*.
    """
    root = workspace_root.rstrip(_SEPARATORS) or workspace_root
    if not path.startswith(root):
        raise FileAccessError(
            f"{path} is outside the workspace root {workspace_root}.",
            path=path,
        )

    remainder = path[len(root):]
    if remainder and remainder[0] not in _SEPARATORS and root not in ("/", "\\"):
        # Sibling directory sharing the prefix, e.g. /ws-other vs /ws.
        raise FileAccessError(
            f"{path} is outside the workspace root {workspace_root}.",
            path=path,
        )

    parts = [part for part in _split(remainder) if part and part != "."]
    if not parts:
        raise FileAccessError(
            f"{path} is the workspace root itself.",
            path=path,
        )
    if ".." in parts:
        raise FileAccessError(
            f"{path} escapes the workspace root {workspace_root}.",
            path=path,
        )
    return "/".join(parts)


def map_to_entries(path: str, workspace_root: str) -> tuple[ArchiveEntry, ...]:
    """Expand *path* into the archive entries it contributes.

    Raises
    ------
    PathMissingError
        If *path* does not exist (including dangling symlinks).
    FileAccessError
        For any other filesystem error, e.g. permission denied.
    """
    try:
        mode = os.stat(path).st_mode
    except FileNotFoundError as exc:
        raise PathMissingError(f"{path} no longer exists.", path=path) from exc
    except OSError as exc:
        raise FileAccessError(f"Cannot stat {path}: {exc.strerror or exc}", path=path) from exc

    name = relative_of(path, workspace_root)
    if not stat.S_ISDIR(mode):
        return (ArchiveEntry(source_path=path, archive_name=name),)

    try:
        children = sorted(os.listdir(path))
    except FileNotFoundError as exc:
        raise PathMissingError(f"{path} no longer exists.", path=path) from exc
    except OSError as exc:
        raise FileAccessError(f"Cannot list {path}: {exc.strerror or exc}", path=path) from exc

    return tuple(
        ArchiveEntry(
            source_path=os.path.join(path, child),
            archive_name=f"{name}/{child}",
        )
        for child in children
    )


def _split(remainder: str) -> list[str]:
    for sep in _SEPARATORS[1:]:
        remainder = remainder.replace(sep, "/")
    return remainder.split("/")
