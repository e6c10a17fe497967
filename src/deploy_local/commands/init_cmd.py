"""Command: target initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from deploy_local.commands._base import DeployCommand

if TYPE_CHECKING:
    from deploy_local.commands._context import AppContext

_INIT_EXAMPLES = """\
  deploy-local init > init.sh && sudo sh init.sh
  sudo deploy-local --exec init
  deploy-local -c deploy/prod.toml init"""


@click.command("init", cls=DeployCommand, examples=_INIT_EXAMPLES)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create directories, scripts, systemd units, and sudoers entry."""
    from deploy_local.services.init import InitService

    config = app.config()
    app.emit(InitService(config, app.executor).init())
