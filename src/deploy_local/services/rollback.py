"""RollbackService — point ``current`` at the previous release."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from deploy_local.domain.ids import is_release_id
from deploy_local.domain.releases import previous_release, releases_newest_first
from deploy_local.errors import DeployError, FilesystemError
from deploy_local.services._helpers import repoint_current
from deploy_local.services.base import BaseService

if TYPE_CHECKING:
    from deploy_local.services.result import ServiceResult

logger = logging.getLogger(__name__)


class RollbackService(BaseService):
    """Repoint the current link to the second-newest release.

    The newest release directory is assumed to be the active one; the
    link target is not read. If ``current`` was repointed by hand, the
    selected release may not be the one before the active release.
    """

    def list_releases(self) -> list[str]:
        """Release directory names, newest first. Missing directory: empty."""
        releases_path = self._config.releases_path
        if not releases_path.exists():
            return []
        try:
            names = [entry.name for entry in releases_path.iterdir()]
        except OSError as exc:
            msg = f"Cannot list {releases_path}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(releases_path)) from exc
        return releases_newest_first(names)

    def rollback(self) -> ServiceResult:
        op = "rollback"
        cfg = self._config
        warnings: list[str] = []

        try:
            releases = self.list_releases()
            unexpected = [name for name in releases if not is_release_id(name)]
            if unexpected:
                warnings.append(
                    f"Non-release entries in {cfg.releases_path}: {', '.join(unexpected)}"
                )

            target = previous_release(releases)
            if target is None:
                logger.info("Nothing to roll back to: releases = %s", releases)
                return self._success(
                    op,
                    {
                        "rolled_back": False,
                        "message": "Nothing to roll back to",
                        "releases": releases,
                    },
                    warnings,
                )

            release_path = cfg.releases_path / target
            previous = repoint_current(self._executor, cfg.current_path, release_path)
        except DeployError as exc:
            return self._failure(op, exc)

        logger.info("Rolled back %s to release %s", cfg.app_name, target)
        return self._success(
            op,
            {
                "rolled_back": True,
                "release_id": target,
                "release_path": str(release_path),
                "current_path": str(cfg.current_path),
                "previous_target": previous,
                "releases": releases,
            },
            warnings,
        )
