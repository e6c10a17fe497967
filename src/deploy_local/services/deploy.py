"""DeployService — install a release and make it current.

Pipeline: RELEASE ID → MKDIR → EXTRACT → REPOINT CURRENT

Extraction completes before the ``current`` link is touched, so the link
never references a partially extracted release. A failed extraction
leaves the new release directory behind for manual cleanup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from deploy_local.domain.ids import new_release_id
from deploy_local.errors import DeployError
from deploy_local.services._helpers import repoint_current
from deploy_local.services.base import BaseService

if TYPE_CHECKING:
    from deploy_local.config.models import DeployConfig
    from deploy_local.infrastructure.executor import Executor
    from deploy_local.services.result import ServiceResult

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DeployService(BaseService):
    """Extract the packaged release into a timestamped directory."""

    def __init__(
        self,
        config: DeployConfig,
        executor: Executor,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        super().__init__(config, executor)
        self._clock = clock

    def deploy(self) -> ServiceResult:
        op = "deploy"
        cfg = self._config
        warnings: list[str] = []

        release_id = new_release_id(self._clock())
        release_path = cfg.releases_path / release_id
        archive = cfg.archive_path

        if self._executor.dry_run and not archive.is_file():
            warnings.append(f"Release archive not found: {archive}")

        try:
            self._executor.note(f"Deploying release to {release_path}")
            self._executor.make_dirs(release_path)

            self._executor.note(f"Extracting tar {archive}")
            self._executor.extract_tar(archive, release_path)

            previous = repoint_current(self._executor, cfg.current_path, release_path)
        except DeployError as exc:
            return self._failure(op, exc)

        logger.info("Deployed %s %s as release %s", cfg.app_name, cfg.version, release_id)
        return self._success(
            op,
            {
                "app": cfg.app_name,
                "version": cfg.version,
                "release_id": release_id,
                "release_path": str(release_path),
                "archive": str(archive),
                "current_path": str(cfg.current_path),
                "previous_target": previous,
            },
            warnings,
        )
