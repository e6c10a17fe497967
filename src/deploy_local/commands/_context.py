"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns the choice of executor, resolves the
deployment config on demand, and emits results with the right stream and
exit status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

import click
from pydantic import ValidationError

from deploy_local.errors import ConfigError
from deploy_local.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from deploy_local.config.models import DeployConfig
    from deploy_local.config.settings import DeploySettings
    from deploy_local.infrastructure.executor import Executor
    from deploy_local.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Config resolution is deferred to the subcommand so ``--help`` works
    without an app name or version configured.
    """

    def __init__(self, settings: DeploySettings) -> None:
        self.settings = settings
        self._executor: Executor | None = None

        from deploy_local.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            mode="exec" if settings.exec_commands else "dry-run",
        )

    def config(self, **overrides: Any) -> DeployConfig:
        """Resolve the deployment config, applying command-level *overrides*.

        Configuration errors are reported like any other failure and exit 1.
        """
        from deploy_local.config.resolve import resolve_config
        from deploy_local.infrastructure.identity import current_identity

        settings = self.settings.with_overrides(**overrides)
        current_user = current_group = None
        if not (settings.deploy_user and settings.deploy_group):
            current_user, current_group = current_identity()
        try:
            return resolve_config(
                settings, current_user=current_user, current_group=current_group
            )
        except ConfigError as exc:
            self.fail(exc.message)
        except ValidationError as exc:
            self.fail(f"Invalid configuration: {exc}")

    @property
    def executor(self) -> Executor:
        """The executor for this invocation (real only with ``--exec``)."""
        if self._executor is None:
            from deploy_local.infrastructure.executor import get_executor

            self._executor = get_executor(exec_commands=self.settings.exec_commands)
        return self._executor

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def fail(self, message: str) -> NoReturn:
        """Report a failure outside any service and exit 1."""
        click.echo(f"ERROR: {message}", err=True)
        raise SystemExit(1)
