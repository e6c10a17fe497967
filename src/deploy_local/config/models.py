"""Resolved deployment configuration.

:class:`DeployConfig` is what every service receives. It is produced once
per invocation by :func:`deploy_local.config.resolve.resolve_config` and
never changes afterwards.

INVARIANT: every ``Path`` field is absolute.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel

from deploy_local.domain.types import RestartMethod


class DeployConfig(BaseModel):
    """Fully resolved configuration for one deploy-local invocation."""

    model_config = {"frozen": True}

    env: str
    env_lang: str
    exec_commands: bool

    app_name: str
    ext_name: str
    version: str

    base_dir: Path
    deploy_path: Path
    releases_path: Path
    scripts_path: Path
    flags_path: Path
    current_path: Path

    runtime_path: Path
    conf_path: Path
    logs_path: Path
    tmp_path: Path
    state_path: Path
    cache_path: Path

    create_runtime_dir: bool
    create_conf_dir: bool
    create_logs_dir: bool
    create_tmp_dir: bool
    create_state_dir: bool
    create_cache_dir: bool

    build_path: Path
    archive_path: Path
    template_dir: Path

    deploy_user: str
    deploy_group: str
    app_user: str
    app_group: str
    deploy_uid: int | None = None
    deploy_gid: int | None = None
    app_uid: int | None = None
    app_gid: int | None = None

    conform: bool
    conform_conf_path: Path

    copy_systemd_units: bool
    systemd_units_dir: Path
    systemd_target_dir: Path
    systemd_version: int

    sudo_deploy: bool
    sudo_app: bool
    sudoers_dir: Path

    restart_method: RestartMethod

    def template_vars(self) -> dict[str, Any]:
        """Variables exposed to templates (paths as strings)."""
        return self.model_dump(mode="json")
