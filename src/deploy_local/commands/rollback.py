"""Command: point the current link at the previous release."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from deploy_local.commands._base import DeployCommand

if TYPE_CHECKING:
    from deploy_local.commands._context import AppContext


@click.command(
    cls=DeployCommand,
    examples="""\
  deploy-local rollback
  deploy-local --exec rollback
  deploy-local --json rollback""",
)
@click.pass_obj
def rollback(app: AppContext) -> None:
    """Repoint the current link to the release before the newest one."""
    from deploy_local.services.rollback import RollbackService

    app.emit(RollbackService(app.config(), app.executor).rollback())
