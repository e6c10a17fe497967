"""Shared service-layer helpers for the current-release link."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from deploy_local.errors import FilesystemError

if TYPE_CHECKING:
    from deploy_local.infrastructure.executor import Executor


def repoint_current(executor: Executor, current_path: Path, release_path: Path) -> str | None:
    """Make *current_path* a symlink to *release_path*.

    Removes the existing link first (dangling links included). Returns the
    previous link target, or None if there was no link.

    Raises:
        FilesystemError: *current_path* exists but is not a symlink.
    """
    previous: str | None = None
    if current_path.is_symlink():
        previous = str(current_path.readlink())
        executor.note(f"Removing link from {previous} to {current_path}")
        executor.remove_link(current_path)
    elif current_path.exists():
        msg = f"{current_path} exists and is not a symlink; refusing to replace it"
        raise FilesystemError(msg, path=str(current_path))
    else:
        executor.note(f"No current link {current_path}")

    executor.note(f"Making link from {release_path} to {current_path}")
    executor.symlink(release_path, current_path)
    return previous
