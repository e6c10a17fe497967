"""DirProvisioner — directories and files with the right owner and mode."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deploy_local.domain.types import DirectorySpec, Principal
    from deploy_local.infrastructure.executor import Executor

logger = logging.getLogger(__name__)


class DirProvisioner:
    """Create directories and reassert ownership through an executor.

    Idempotent: creating an existing directory succeeds, and ownership and
    mode are always reapplied, whatever they were before.
    """

    def __init__(self, executor: Executor) -> None:
        self._executor = executor

    def create_dir(self, path: Path, owner: Principal, group: Principal, mode: int) -> None:
        """Ensure *path* exists (parents included) owned by *owner*:*group* with *mode*."""
        self._executor.note(f"Creating dir {path}")
        self._executor.make_dirs(path)
        self.own_file(path, owner, group, mode)

    def own_file(self, path: Path, owner: Principal, group: Principal, mode: int) -> None:
        """Set ownership and permission bits on an existing *path*."""
        self._executor.chown(path, owner, group)
        self._executor.chmod(path, mode)

    def provision(self, spec: DirectorySpec) -> None:
        logger.debug("Provisioning %s dir %s", spec.description or "app", spec.path)
        self.create_dir(spec.path, spec.owner, spec.group, spec.mode)
