"""Command: deploy the packaged release."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from deploy_local.commands._base import DeployCommand

if TYPE_CHECKING:
    from deploy_local.commands._context import AppContext


@click.command(
    cls=DeployCommand,
    examples="""\
  deploy-local deploy
  deploy-local deploy --version 0.2.1
  deploy-local --exec deploy
  deploy-local deploy > deploy.sh""",
)
@click.option("--version", "version", default=None, help="Release version to deploy.")
@click.pass_obj
def deploy(app: AppContext, version: str | None) -> None:
    """Extract the release into a new timestamped directory and make it current."""
    from deploy_local.services.deploy import DeployService

    config = app.config(version=version)
    app.emit(DeployService(config, app.executor).deploy())
