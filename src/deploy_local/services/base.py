"""BaseService — shared foundation for deploy-local services.

Every service receives the resolved :class:`DeployConfig` and the
executor selected for this invocation. Services never decide between
executing and printing themselves.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from deploy_local.infrastructure.executor import DryRunExecutor
from deploy_local.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from deploy_local.config.models import DeployConfig
    from deploy_local.errors import DeployError
    from deploy_local.infrastructure.executor import Executor

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service classes.

    Usage::

        class DeployService(BaseService):
            def deploy(self) -> ServiceResult:
                try:
                    ...
                except DeployError as exc:
                    return self._failure("deploy", exc)
                return self._success("deploy", {...})
    """

    def __init__(self, config: DeployConfig, executor: Executor) -> None:
        self._config = config
        self._executor = executor

    @property
    def config(self) -> DeployConfig:
        return self._config

    @property
    def executor(self) -> Executor:
        return self._executor

    def _meta(self) -> dict[str, Any]:
        return {"mode": "dry-run" if self._executor.dry_run else "exec"}

    def _success(
        self,
        op: str,
        data: dict[str, Any],
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Build a success result, attaching recorded commands in dry-run mode."""
        if isinstance(self._executor, DryRunExecutor):
            data = {**data, "commands": list(self._executor.commands)}
        return ServiceResult(
            ok=True,
            op=op,
            data=data,
            warnings=warnings or [],
            meta=self._meta(),
        )

    def _failure(self, op: str, exc: DeployError) -> ServiceResult:
        logger.debug("%s failed: %s", op, exc.message, exc_info=True)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError.from_exception(exc),
            meta=self._meta(),
        )
