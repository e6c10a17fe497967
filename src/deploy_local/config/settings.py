"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DEPLOY_LOCAL_*`` prefix
  3. TOML file    — ``deploy-local.toml`` discovered via walk-up
  4. Code defaults — baked into the fields below

Values here are raw inputs. Derived paths (releases, current link,
category directories) are computed by
:func:`deploy_local.config.resolve.resolve_config`; any of them may be set
explicitly to bypass the derivation.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from deploy_local.config.discovery import find_config
from deploy_local.domain.types import RestartMethod
from deploy_local.errors import ConfigError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``deploy-local.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise ConfigError(msg, path=str(toml_path)) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DeploySettings(BaseSettings):
    """Merged raw settings for one deploy-local invocation.

    Frozen after construction and stored on the CLI context.

    Attributes:
        project_root: Directory relative paths are anchored at (parent of
            ``deploy-local.toml``, or CWD if no config found).
        config_path: The config file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DEPLOY_LOCAL_",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # Execute privileged commands, otherwise print the shell equivalents.
    exec_commands: bool = False

    # --- Application ---
    env: str = "prod"
    env_lang: str = "en_US.UTF-8"
    app_name: str | None = None
    ext_name: str | None = None
    version: str | None = None

    # --- Locations ---
    base_dir: Path = Path("/srv")
    deploy_dir: Path | None = None
    build_path: Path | None = None
    template_dir: Path = Path("templates/deploy_local")

    releases_path: Path | None = None
    scripts_path: Path | None = None
    flags_path: Path | None = None
    current_path: Path | None = None

    # --- OS users ---
    deploy_user: str | None = None
    deploy_group: str | None = None
    app_user: str | None = None
    app_group: str | None = None
    deploy_uid: int | None = None
    deploy_gid: int | None = None
    app_uid: int | None = None
    app_gid: int | None = None

    # --- Integrations ---
    conform: bool = False
    conform_conf_path: Path | None = None

    copy_systemd_units: bool = False
    systemd_units_dir: Path | None = None
    systemd_target_dir: Path = Path("/lib/systemd/system")
    # CentOS 7 ships 219, Ubuntu 16.04 ships 229.
    systemd_version: int = 219

    # Create a sudoers.d entry allowing the deploy or app user to restart the app.
    sudo_deploy: bool = False
    sudo_app: bool = False
    sudoers_dir: Path = Path("/etc/sudoers.d")

    restart_method: RestartMethod = RestartMethod.SYSTEMD_FLAG

    # --- Category directories ---
    # Newer systemd creates these itself; older versions need them up front.
    # The runtime dir doubles as the release's mutable dir.
    create_runtime_dir: bool = True
    runtime_dir_name: str | None = None
    runtime_dir_base: Path = Path("/run")
    runtime_path: Path | None = None

    create_conf_dir: bool = False
    conf_dir_name: str | None = None
    conf_dir_base: Path = Path("/etc")
    conf_path: Path | None = None

    create_logs_dir: bool = False
    logs_dir_name: str | None = None
    logs_dir_base: Path = Path("/var/log")
    logs_path: Path | None = None

    create_tmp_dir: bool = False
    tmp_dir_name: str | None = None
    tmp_dir_base: Path = Path("/var/tmp")
    tmp_path: Path | None = None

    create_state_dir: bool = False
    state_dir_name: str | None = None
    state_dir_base: Path = Path("/var/lib")
    state_path: Path | None = None

    create_cache_dir: bool = False
    cache_dir_name: str | None = None
    cache_dir_base: Path = Path("/var/cache")
    cache_path: Path | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> DeploySettings:
        """Construct settings from a CLI invocation.

        Discovers ``deploy-local.toml`` via walk-up (or explicit
        *config_path*), resolves *project_root* from the config file's
        parent directory, and merges CLI flags as highest-priority
        overrides. Flags passed as ``None`` are treated as not given.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if not p.is_file():
                msg = f"Config file not found: {config_path}"
                raise ConfigError(msg, path=config_path)
            toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent.resolve() if toml_path else Path.cwd()

        overrides = {key: value for key, value in cli_flags.items() if value is not None}

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **overrides,
            )
        finally:
            _tls.toml_path = None

    def with_overrides(self, **overrides: Any) -> DeploySettings:
        """Return a copy with command-level overrides applied (``None`` ignored)."""
        update = {key: value for key, value in overrides.items() if value is not None}
        if not update:
            return self
        return self.model_copy(update=update)
