"""Subcommand modules for deploy-local.

Provides register_commands() which uses deferred imports to keep
``deploy-local --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the standalone commands on the root CLI group."""
    from deploy_local.commands.deploy import deploy
    from deploy_local.commands.init_cmd import init_cmd
    from deploy_local.commands.rollback import rollback

    cli.add_command(init_cmd)
    cli.add_command(deploy)
    cli.add_command(rollback)
