"""Resolve raw settings into a :class:`DeployConfig`.

Pure: the same settings (and invoking identity) always produce the same
config. Nothing here touches the filesystem or the user database; the
caller supplies the invoking user and group names.
"""

from __future__ import annotations

from pathlib import Path

from deploy_local.config.models import DeployConfig
from deploy_local.config.settings import DeploySettings
from deploy_local.domain.layout import (
    CATEGORY_BASES,
    CURRENT_LINK,
    FLAGS_DIR,
    RELEASES_DIR,
    SCRIPTS_DIR,
    anchor,
    ext_name_for,
    release_archive_path,
)
from deploy_local.errors import ConfigError

# Directory under build_path holding generated systemd units.
SYSTEMD_BUILD_DIR = "systemd"


def resolve_config(
    settings: DeploySettings,
    *,
    current_user: str | None = None,
    current_group: str | None = None,
) -> DeployConfig:
    """Derive the full deployment layout from *settings*.

    Explicitly set paths win over derived ones. Relative paths are anchored
    at ``settings.project_root``.

    Raises:
        ConfigError: app name, version, or deploy user/group is missing.
    """
    if not settings.app_name:
        msg = "app_name is not configured"
        raise ConfigError(msg, key="app_name")
    if not settings.version:
        msg = "version is not configured"
        raise ConfigError(msg, key="version")

    root = settings.project_root
    if not root.is_absolute():
        msg = f"project_root must be absolute: {root}"
        raise ConfigError(msg, key="project_root")

    def absolute(path: Path) -> Path:
        return anchor(path, root)

    app_name = settings.app_name
    ext_name = settings.ext_name or ext_name_for(app_name)

    base_dir = absolute(settings.base_dir)
    deploy_path = absolute(settings.deploy_dir or base_dir / ext_name)

    def deploy_sub(explicit: Path | None, name: str) -> Path:
        return absolute(explicit) if explicit else deploy_path / name

    categories: dict[str, Path] = {}
    for category in CATEGORY_BASES:
        explicit: Path | None = getattr(settings, f"{category}_path")
        if explicit:
            categories[f"{category}_path"] = absolute(explicit)
            continue
        base: Path = getattr(settings, f"{category}_dir_base")
        name: str | None = getattr(settings, f"{category}_dir_name")
        categories[f"{category}_path"] = absolute(base / (name or ext_name))

    build_path = absolute(settings.build_path or Path("_build") / settings.env)

    deploy_user = settings.deploy_user or current_user
    deploy_group = settings.deploy_group or current_group
    if not deploy_user:
        msg = "deploy_user is not configured and the invoking user is unknown"
        raise ConfigError(msg, key="deploy_user")
    if not deploy_group:
        msg = "deploy_group is not configured and the invoking group is unknown"
        raise ConfigError(msg, key="deploy_group")

    return DeployConfig(
        env=settings.env,
        env_lang=settings.env_lang,
        exec_commands=settings.exec_commands,
        app_name=app_name,
        ext_name=ext_name,
        version=settings.version,
        base_dir=base_dir,
        deploy_path=deploy_path,
        releases_path=deploy_sub(settings.releases_path, RELEASES_DIR),
        scripts_path=deploy_sub(settings.scripts_path, SCRIPTS_DIR),
        flags_path=deploy_sub(settings.flags_path, FLAGS_DIR),
        current_path=deploy_sub(settings.current_path, CURRENT_LINK),
        **categories,
        create_runtime_dir=settings.create_runtime_dir,
        create_conf_dir=settings.create_conf_dir,
        create_logs_dir=settings.create_logs_dir,
        create_tmp_dir=settings.create_tmp_dir,
        create_state_dir=settings.create_state_dir,
        create_cache_dir=settings.create_cache_dir,
        build_path=build_path,
        archive_path=release_archive_path(build_path, app_name, settings.version),
        template_dir=absolute(settings.template_dir),
        deploy_user=deploy_user,
        deploy_group=deploy_group,
        app_user=settings.app_user or deploy_user,
        app_group=settings.app_group or deploy_group,
        deploy_uid=settings.deploy_uid,
        deploy_gid=settings.deploy_gid,
        app_uid=settings.app_uid,
        app_gid=settings.app_gid,
        conform=settings.conform,
        conform_conf_path=absolute(
            settings.conform_conf_path or Path("/etc") / ext_name / f"{app_name}.conf"
        ),
        copy_systemd_units=settings.copy_systemd_units,
        systemd_units_dir=absolute(
            settings.systemd_units_dir
            or build_path / SYSTEMD_BUILD_DIR / "lib" / "systemd" / "system"
        ),
        systemd_target_dir=absolute(settings.systemd_target_dir),
        systemd_version=settings.systemd_version,
        sudo_deploy=settings.sudo_deploy,
        sudo_app=settings.sudo_app,
        sudoers_dir=absolute(settings.sudoers_dir),
        restart_method=settings.restart_method,
    )
