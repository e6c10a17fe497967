"""Tests for InitService — directories, scripts, units, sudoers."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from deploy_local.config.models import DeployConfig
from deploy_local.domain.types import Principal
from deploy_local.errors import IdentityLookupError
from deploy_local.infrastructure.executor import DryRunExecutor, RealExecutor
from deploy_local.infrastructure.identity import IdentityResolver
from deploy_local.services.init import InitService, resolve_owners


class FakeResolver(IdentityResolver):
    """Resolver backed by in-memory records."""

    def __init__(self, users: dict[str, int] | None = None, groups: dict[str, int] | None = None):
        self.users = users or {}
        self.groups = groups or {}
        self.lookups: list[str] = []

    def passwd_record(self, name: str) -> str:
        self.lookups.append(f"user:{name}")
        if name not in self.users:
            raise IdentityLookupError(f"No user named {name!r}")
        uid = self.users[name]
        return f"{name}:x:{uid}:{uid}::/home/{name}:/bin/sh"

    def group_record(self, name: str) -> str:
        self.lookups.append(f"group:{name}")
        if name not in self.groups:
            raise IdentityLookupError(f"No group named {name!r}")
        return f"{name}:x:{self.groups[name]}:"


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


class TestResolveOwners:
    def test_dry_run_uses_names_only(self, make_config: Callable[..., DeployConfig]) -> None:
        config = make_config(deploy_uid=None, app_uid=None)
        resolver = FakeResolver()
        owners = resolve_owners(config, resolver, lookup=False)
        assert owners.deploy_user == Principal(config.deploy_user, None)
        assert resolver.lookups == []

    def test_lookup_fills_missing_ids(self, make_config: Callable[..., DeployConfig]) -> None:
        config = make_config(
            deploy_user="deploy",
            app_user="app",
            app_group="app",
            deploy_uid=None,
            app_uid=None,
            app_gid=None,
        )
        resolver = FakeResolver(users={"deploy": 1001, "app": 1002}, groups={"app": 2000})
        owners = resolve_owners(config, resolver, lookup=True)
        assert owners.deploy_user == Principal("deploy", 1001)
        assert owners.app_user == Principal("app", 1002)
        assert owners.app_group == Principal("app", 2000)
        assert "group:app" in resolver.lookups


class TestInitExec:
    def test_creates_deploy_tree(self, make_config: Callable[..., DeployConfig]) -> None:
        config = make_config(systemd_version=240)
        result = InitService(config, RealExecutor(), FakeResolver()).init()

        assert result.ok, result.error
        for path in (
            config.deploy_path,
            config.releases_path,
            config.scripts_path,
            config.flags_path,
        ):
            assert path.is_dir()
            assert _mode(path) == 0o750
            assert path.stat().st_uid == os.getuid()
        assert not config.runtime_path.exists()

    def test_old_systemd_creates_runtime_and_flagged_dirs(
        self, make_config: Callable[..., DeployConfig]
    ) -> None:
        config = make_config(systemd_version=219, create_logs_dir=True, create_conf_dir=True)
        result = InitService(config, RealExecutor(), FakeResolver()).init()

        assert result.ok, result.error
        assert _mode(config.runtime_path) == 0o750
        assert _mode(config.conf_path) == 0o750
        assert _mode(config.logs_path) == 0o700
        assert not config.state_path.exists()
        assert str(config.logs_path) in result.data["directories"]

    def test_renders_remote_console(self, config: DeployConfig) -> None:
        result = InitService(config, RealExecutor(), FakeResolver()).init()

        script = config.scripts_path / "remote_console.sh"
        assert result.ok, result.error
        assert script.is_file()
        assert _mode(script) == 0o750
        assert str(config.current_path) in script.read_text()
        assert str(script) in result.data["files"]

    def test_template_override(self, config: DeployConfig) -> None:
        config.template_dir.mkdir(parents=True)
        (config.template_dir / "remote_console.sh.j2").write_text("echo {{ ext_name }}\n")
        InitService(config, RealExecutor(), FakeResolver()).init()
        assert (config.scripts_path / "remote_console.sh").read_text() == "echo my-app\n"

    def test_template_error_aborts(self, config: DeployConfig) -> None:
        config.template_dir.mkdir(parents=True)
        (config.template_dir / "remote_console.sh.j2").write_text("{{ undefined_thing }}")
        result = InitService(config, RealExecutor(), FakeResolver()).init()
        assert not result.ok
        assert result.error.code == "TEMPLATE_ERROR"
        assert not (config.scripts_path / "remote_console.sh").exists()

    def test_lookup_error_aborts_before_mkdir(
        self, make_config: Callable[..., DeployConfig]
    ) -> None:
        config = make_config(deploy_user="ghost", deploy_uid=None)
        result = InitService(config, RealExecutor(), FakeResolver()).init()
        assert not result.ok
        assert result.error.code == "LOOKUP_ERROR"
        assert not config.deploy_path.exists()

    def test_systemd_units_copied_and_enabled(
        self, make_config: Callable[..., DeployConfig], tmp_path: Path
    ) -> None:
        config = make_config(copy_systemd_units=True, systemd_version=240)
        config.systemd_units_dir.mkdir(parents=True)
        (config.systemd_units_dir / "my-app.service").write_text("[Unit]\n")
        config.systemd_target_dir.mkdir(parents=True)

        executor = RealExecutor()
        enabled: list[str] = []
        owned: list[Path] = []
        with (
            patch.object(executor, "enable_unit", side_effect=enabled.append),
            patch.object(executor, "chown", side_effect=lambda path, *_: owned.append(path)),
        ):
            result = InitService(config, executor, FakeResolver()).init()

        assert result.ok, result.error
        unit = config.systemd_target_dir / "my-app.service"
        assert unit.read_text() == "[Unit]\n"
        assert _mode(unit) == 0o644
        assert unit in owned
        assert enabled == ["my-app.service"]
        assert result.data["units"] == ["my-app.service"]

    def test_missing_units_dir(self, make_config: Callable[..., DeployConfig]) -> None:
        config = make_config(copy_systemd_units=True, systemd_version=240)
        result = InitService(config, RealExecutor(), FakeResolver()).init()
        assert not result.ok
        assert result.error.code == "FILESYSTEM_ERROR"

    def test_sudoers(self, make_config: Callable[..., DeployConfig]) -> None:
        config = make_config(sudo_deploy=True, systemd_version=240)
        config.sudoers_dir.mkdir(parents=True)
        executor = RealExecutor()
        with patch.object(executor, "chown"):
            result = InitService(config, executor, FakeResolver()).init()

        assert result.ok, result.error
        sudoers = config.sudoers_dir / "my-app"
        assert "NOPASSWD" in sudoers.read_text()
        assert _mode(sudoers) == 0o600

    def test_rerun_is_idempotent(self, make_config: Callable[..., DeployConfig]) -> None:
        config = make_config(systemd_version=240)
        service = InitService(config, RealExecutor(), FakeResolver())
        assert service.init().ok
        assert service.init().ok
        assert _mode(config.deploy_path) == 0o750


class TestInitDryRun:
    def test_prints_script(self, make_config: Callable[..., DeployConfig]) -> None:
        config = make_config(systemd_version=219, sudo_app=True, copy_systemd_units=True)
        config.systemd_units_dir.mkdir(parents=True)
        (config.systemd_units_dir / "my-app.service").write_text("[Unit]\n")

        result = InitService(config, DryRunExecutor(), FakeResolver()).init()

        assert result.ok, result.error
        commands = result.data["commands"]
        assert f"mkdir -p {config.deploy_path}" in commands
        assert f"mkdir -p {config.runtime_path}" in commands
        assert f"chmod 750 {config.scripts_path}" in commands
        assert any(c.startswith(f"cat > {config.scripts_path}/remote_console.sh") for c in commands)
        assert "systemctl enable my-app.service" in commands
        assert f"chown root:root {config.sudoers_dir}/my-app" in commands
        assert f"chmod 600 {config.sudoers_dir}/my-app" in commands

    def test_no_lookups_and_no_changes(
        self,
        tmp_path: Path,
        make_config: Callable[..., DeployConfig],
        tree_snapshot: Callable[[Path], dict],
    ) -> None:
        config = make_config(
            deploy_user="nobody-here", deploy_uid=None, app_uid=None, sudo_deploy=True
        )
        resolver = FakeResolver()
        before = tree_snapshot(tmp_path)

        result = InitService(config, DryRunExecutor(), resolver).init()

        assert result.ok, result.error
        assert resolver.lookups == []
        assert tree_snapshot(tmp_path) == before

    @pytest.mark.parametrize("flag", ["sudo_deploy", "sudo_app"])
    def test_sudoers_flags(self, make_config: Callable[..., DeployConfig], flag: str) -> None:
        config = make_config(**{flag: True})
        result = InitService(config, DryRunExecutor(), FakeResolver()).init()
        assert str(config.sudoers_dir / "my-app") in result.data["files"]


class TestPlatformResolver:
    def test_dry_run_never_picks_a_resolver(
        self, make_config: Callable[..., DeployConfig], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(sys, "platform", "freebsd14")
        result = InitService(make_config(), DryRunExecutor()).init()
        assert result.ok, result.error

    def test_exec_on_unsupported_platform_fails_cleanly(
        self, make_config: Callable[..., DeployConfig], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(sys, "platform", "freebsd14")
        config = make_config()
        result = InitService(config, RealExecutor()).init()
        assert not result.ok
        assert result.error.code == "LOOKUP_ERROR"
        assert not config.deploy_path.exists()
