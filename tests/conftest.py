"""Shared pytest fixtures for deploy-local tests."""

from __future__ import annotations

import io
import os
import tarfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from deploy_local.config.models import DeployConfig
from deploy_local.config.resolve import resolve_config
from deploy_local.config.settings import DeploySettings
from deploy_local.infrastructure.identity import current_identity

APP_NAME = "my_app"
VERSION = "0.1.0"


def write_archive(path: Path, files: dict[str, str]) -> Path:
    """Write a gzipped tarball containing *files* (relative name -> content)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:gz") as tar:
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


def snapshot(root: Path) -> dict[str, tuple[str, int, str | bytes | None]]:
    """Map every entry under *root* to (kind, mode, link target)."""
    entries: dict[str, tuple[str, int, str | bytes | None]] = {}
    for path in sorted(root.rglob("*")):
        st = path.lstat()
        if path.is_symlink():
            entries[str(path)] = ("link", st.st_mode, str(path.readlink()))
        elif path.is_dir():
            entries[str(path)] = ("dir", st.st_mode, None)
        else:
            entries[str(path)] = ("file", st.st_mode, path.read_bytes())
    return entries


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's DEPLOY_LOCAL_* environment out of the tests."""
    for key in list(os.environ):
        if key.startswith("DEPLOY_LOCAL_"):
            monkeypatch.delenv(key)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def identity() -> tuple[str, str]:
    """Names of the user and group running the tests."""
    return current_identity()


@pytest.fixture
def settings_values(tmp_path: Path, identity: tuple[str, str]) -> dict[str, Any]:
    """Settings that keep every target path inside ``tmp_path``.

    Owners are the invoking user and group with explicit ids, so chown
    succeeds without root and without a user database lookup.
    """
    user, group = identity
    return {
        "app_name": APP_NAME,
        "version": VERSION,
        "base_dir": str(tmp_path / "srv"),
        "build_path": str(tmp_path / "_build" / "prod"),
        "deploy_user": user,
        "deploy_group": group,
        "deploy_uid": os.getuid(),
        "deploy_gid": os.getgid(),
        "app_uid": os.getuid(),
        "app_gid": os.getgid(),
        "runtime_dir_base": str(tmp_path / "run"),
        "conf_dir_base": str(tmp_path / "etc"),
        "logs_dir_base": str(tmp_path / "var" / "log"),
        "tmp_dir_base": str(tmp_path / "var" / "tmp"),
        "state_dir_base": str(tmp_path / "var" / "lib"),
        "cache_dir_base": str(tmp_path / "var" / "cache"),
        "systemd_target_dir": str(tmp_path / "lib" / "systemd" / "system"),
        "sudoers_dir": str(tmp_path / "etc" / "sudoers.d"),
    }


@pytest.fixture
def make_config(
    tmp_path: Path, settings_values: dict[str, Any]
) -> Callable[..., DeployConfig]:
    """Build a resolved config rooted in ``tmp_path``; kwargs override settings."""

    def _make(**overrides: Any) -> DeployConfig:
        values = {**settings_values, **overrides}
        settings = DeploySettings(project_root=tmp_path, **values)
        return resolve_config(settings)

    return _make


@pytest.fixture
def config(make_config: Callable[..., DeployConfig]) -> DeployConfig:
    """Default resolved config rooted in ``tmp_path``."""
    return make_config()


@pytest.fixture
def release_archive(config: DeployConfig) -> Path:
    """A release tarball with ``a.txt`` and ``b/c.txt`` at the configured path."""
    return write_archive(config.archive_path, {"a.txt": "alpha\n", "b/c.txt": "charlie\n"})


@pytest.fixture
def project(
    tmp_path: Path,
    settings_values: dict[str, Any],
    monkeypatch: pytest.MonkeyPatch,
) -> Path:
    """A project directory with ``deploy-local.toml`` and a built release; CWD set to it."""
    lines = []
    for key, value in settings_values.items():
        rendered = f'"{value}"' if isinstance(value, str) else str(value)
        lines.append(f"{key} = {rendered}")
    (tmp_path / "deploy-local.toml").write_text("\n".join(lines) + "\n")

    archive = (
        tmp_path / "_build" / "prod" / "rel" / APP_NAME / "releases" / VERSION
        / f"{APP_NAME}.tar.gz"
    )
    write_archive(archive, {"a.txt": "alpha\n", "b/c.txt": "charlie\n"})
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def archive_writer() -> Callable[[Path, dict[str, str]], Path]:
    """The :func:`write_archive` helper, for tests that need custom archives."""
    return write_archive


@pytest.fixture
def tree_snapshot() -> Callable[[Path], dict[str, tuple[str, int, str | bytes | None]]]:
    """The :func:`snapshot` helper, for asserting a tree was not touched."""
    return snapshot
