"""InitService — prepare the target system for deploys.

Pipeline: OWNERS → DIRECTORIES → SCRIPTS → SYSTEMD UNITS → SUDOERS

Numeric user/group ids are only looked up when commands are executed;
dry-run output uses names. A failed lookup aborts before any directory
is created.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from deploy_local.domain.directories import directory_specs
from deploy_local.domain.types import ROOT_GROUP, ROOT_USER, Owners, Principal
from deploy_local.errors import DeployError, FilesystemError
from deploy_local.infrastructure.identity import get_identity_resolver
from deploy_local.infrastructure.templates import render_template
from deploy_local.services.base import BaseService
from deploy_local.services.provision import DirProvisioner

if TYPE_CHECKING:
    from deploy_local.config.models import DeployConfig
    from deploy_local.infrastructure.executor import Executor
    from deploy_local.infrastructure.identity import IdentityResolver
    from deploy_local.services.result import ServiceResult

logger = logging.getLogger(__name__)

SCRIPT_MODE = 0o750
UNIT_MODE = 0o644
SUDOERS_MODE = 0o600

SCRIPT_TEMPLATES = ("remote_console.sh",)


def resolve_owners(
    config: DeployConfig,
    resolver: IdentityResolver | None = None,
    *,
    lookup: bool,
) -> Owners:
    """Build the owner principals, looking up missing ids when *lookup* is set.

    Without a *resolver*, lookups go through the one for the running
    platform.

    Raises:
        IdentityLookupError: the platform is unsupported or a name is unknown.
    """
    if not lookup:
        return Owners(
            deploy_user=Principal(config.deploy_user, config.deploy_uid),
            deploy_group=Principal(config.deploy_group, config.deploy_gid),
            app_user=Principal(config.app_user, config.app_uid),
            app_group=Principal(config.app_group, config.app_gid),
        )
    if resolver is None:
        resolver = get_identity_resolver()
    return Owners(
        deploy_user=resolver.user(config.deploy_user, config.deploy_uid),
        deploy_group=resolver.group(config.deploy_group, config.deploy_gid),
        app_user=resolver.user(config.app_user, config.app_uid),
        app_group=resolver.group(config.app_group, config.app_gid),
    )


class InitService(BaseService):
    """Create the directory structure and support files for local deploys."""

    def __init__(
        self,
        config: DeployConfig,
        executor: Executor,
        resolver: IdentityResolver | None = None,
    ) -> None:
        super().__init__(config, executor)
        self._resolver = resolver
        self._provisioner = DirProvisioner(executor)

    def init(self) -> ServiceResult:
        op = "init"
        cfg = self._config
        directories: list[str] = []
        files: list[str] = []
        units: list[str] = []

        try:
            owners = resolve_owners(cfg, self._resolver, lookup=not self._executor.dry_run)

            for spec in directory_specs(cfg, owners):
                self._provisioner.provision(spec)
                directories.append(str(spec.path))

            for template in SCRIPT_TEMPLATES:
                target = cfg.scripts_path / template
                self.install_template(
                    template, target, owners.deploy_user, owners.app_group, SCRIPT_MODE
                )
                files.append(str(target))

            if cfg.copy_systemd_units:
                units = self.install_systemd_units()
                files.extend(str(cfg.systemd_target_dir / unit) for unit in units)

            if cfg.sudo_deploy or cfg.sudo_app:
                target = cfg.sudoers_dir / cfg.ext_name
                self.install_template("sudoers", target, ROOT_USER, ROOT_GROUP, SUDOERS_MODE)
                files.append(str(target))
        except DeployError as exc:
            return self._failure(op, exc)

        data: dict[str, Any] = {
            "deploy_path": str(cfg.deploy_path),
            "directories": directories,
            "files": files,
            "units": units,
        }
        return self._success(op, data)

    def install_template(
        self,
        template: str,
        target: Path,
        owner: Principal,
        group: Principal,
        mode: int,
    ) -> None:
        """Render *template* to *target* and set its ownership."""
        self._executor.note(f"Creating file {target} from template {template}")
        content = render_template(
            template,
            self._config.template_vars(),
            override_dir=self._config.template_dir,
        )
        self._executor.write_file(target, content)
        self._provisioner.own_file(target, owner, group, mode)

    def install_systemd_units(self) -> list[str]:
        """Copy generated unit files into the systemd directory and enable them."""
        src_dir = self._config.systemd_units_dir
        dst_dir = self._config.systemd_target_dir
        try:
            names = sorted(entry.name for entry in src_dir.iterdir() if entry.is_file())
        except OSError as exc:
            msg = f"Cannot list systemd units in {src_dir}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(src_dir)) from exc

        for name in names:
            src_file = src_dir / name
            dst_file = dst_dir / name
            self._executor.note(f"Copying systemd unit from {src_file} to {dst_file}")
            self._executor.copy_file(src_file, dst_file)
            self._provisioner.own_file(dst_file, ROOT_USER, ROOT_GROUP, UNIT_MODE)
            self._executor.enable_unit(name)
        return names
