"""Directories a service needs before it first starts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from deploy_local.domain.layout import SYSTEMD_MANAGED_DIRS_VERSION
from deploy_local.domain.types import DirectorySpec, Owners

if TYPE_CHECKING:
    from deploy_local.config.models import DeployConfig

DEPLOY_DIR_MODE = 0o750
APP_DIR_MODE = 0o700


def directory_specs(config: DeployConfig, owners: Owners) -> list[DirectorySpec]:
    """Return the directories ``init`` must provision, in creation order.

    The deploy tree is always included. Runtime and the optional category
    directories are only included for systemd older than 235, which cannot
    create them itself (``RuntimeDirectory=`` and friends). There the
    runtime directory is included unless ``create_runtime_dir`` is off; the
    others only when their ``create_*_dir`` flag is on.
    """
    deploy_user, app_user, app_group = owners.deploy_user, owners.app_user, owners.app_group

    specs = [
        DirectorySpec(config.deploy_path, deploy_user, app_group, DEPLOY_DIR_MODE, "deploy"),
        DirectorySpec(config.releases_path, deploy_user, app_group, DEPLOY_DIR_MODE, "releases"),
        DirectorySpec(config.scripts_path, deploy_user, app_group, DEPLOY_DIR_MODE, "scripts"),
        # Touched to trigger a restart after deploying a new release.
        DirectorySpec(config.flags_path, deploy_user, app_group, DEPLOY_DIR_MODE, "flags"),
    ]

    if config.systemd_version >= SYSTEMD_MANAGED_DIRS_VERSION:
        return specs

    if config.create_runtime_dir:
        specs.append(
            DirectorySpec(config.runtime_path, app_user, app_group, DEPLOY_DIR_MODE, "runtime")
        )
    if config.create_conf_dir:
        specs.append(
            DirectorySpec(config.conf_path, deploy_user, app_group, DEPLOY_DIR_MODE, "conf")
        )

    optional = [
        (config.create_logs_dir, config.logs_path, "logs"),
        (config.create_tmp_dir, config.tmp_path, "tmp"),
        (config.create_state_dir, config.state_path, "state"),
        (config.create_cache_dir, config.cache_path, "cache"),
    ]
    for enabled, path, description in optional:
        if enabled:
            specs.append(DirectorySpec(path, app_user, app_group, APP_DIR_MODE, description))
    return specs
