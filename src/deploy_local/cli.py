"""Root CLI group for deploy-local with global flags and command registration."""

from __future__ import annotations

import click
from pydantic import ValidationError

from deploy_local import __version__
from deploy_local.commands import register_commands
from deploy_local.commands._context import AppContext
from deploy_local.config.settings import DeploySettings
from deploy_local.errors import ConfigError


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="deploy-local")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--exec/--dry-run",
    "exec_commands",
    default=None,
    help="Execute commands, or only print them (default: from config, else dry-run).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    exec_commands: bool | None,
) -> None:
    """deploy-local — deploy a packaged release to the local machine."""
    ctx.ensure_object(dict)
    try:
        settings = DeploySettings.from_cli(
            config_path=config_path,
            json_output=json_output or None,
            quiet=quiet or None,
            verbose=verbose or None,
            log_json=log_json or None,
            exec_commands=exec_commands,
        )
    except ConfigError as exc:
        raise click.ClickException(exc.message) from exc
    except ValidationError as exc:
        msg = f"Invalid configuration: {exc}"
        raise click.ClickException(msg) from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
