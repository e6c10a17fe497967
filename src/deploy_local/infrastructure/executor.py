"""Executors: perform system changes or print the equivalent commands.

Deploying needs elevated permissions, so instead of executing changes the
tool can emit the shell equivalents. The output can be captured into a
script and run under sudo.

One executor is chosen per invocation and passed to every service:

- :class:`RealExecutor` makes syscalls and runs subprocesses.
- :class:`DryRunExecutor` records shell commands and never touches the
  filesystem.

Read-only queries (``exists``, listing directories) are not routed
through executors.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tarfile
from abc import ABC, abstractmethod
from pathlib import Path

from deploy_local.domain.types import Principal
from deploy_local.errors import ArchiveError, CommandError, FilesystemError

logger = logging.getLogger(__name__)

_HEREDOC_MARKER = "DEPLOY_LOCAL_EOF"


def _q(value: Path | str) -> str:
    return shlex.quote(str(value))


class Executor(ABC):
    """Operations that change the target system."""

    dry_run: bool = False

    @abstractmethod
    def note(self, message: str) -> None:
        """Announce the next step."""

    @abstractmethod
    def make_dirs(self, path: Path) -> None:
        """Create *path* and its parents; existing directories are fine."""

    @abstractmethod
    def chown(self, path: Path, owner: Principal, group: Principal) -> None:
        """Set owner and group of *path*."""

    @abstractmethod
    def chmod(self, path: Path, mode: int) -> None:
        """Set permission bits of *path*."""

    @abstractmethod
    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy file contents from *src* to *dst*."""

    @abstractmethod
    def write_file(self, path: Path, content: str) -> None:
        """Write *content* to *path*, replacing it."""

    @abstractmethod
    def extract_tar(self, archive: Path, dest: Path) -> None:
        """Extract a gzipped tar *archive* into the existing directory *dest*."""

    @abstractmethod
    def remove_link(self, path: Path) -> None:
        """Remove the symlink at *path*."""

    @abstractmethod
    def symlink(self, target: Path, link: Path) -> None:
        """Create a symlink at *link* pointing to *target*."""

    @abstractmethod
    def enable_unit(self, name: str) -> None:
        """Enable a systemd unit."""


class RealExecutor(Executor):
    """Apply every operation to the local system."""

    dry_run = False

    def note(self, message: str) -> None:
        logger.info(message)

    def make_dirs(self, path: Path) -> None:
        logger.debug("mkdir -p %s", path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot create directory {path}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(path)) from exc

    def chown(self, path: Path, owner: Principal, group: Principal) -> None:
        if owner.id is None or group.id is None:
            msg = f"Cannot chown {path}: ids of {owner.name}:{group.name} were not looked up"
            raise FilesystemError(msg, path=str(path))
        logger.debug("chown %s:%s %s", owner.id, group.id, path)
        try:
            os.chown(path, owner.id, group.id)
        except OSError as exc:
            msg = f"Cannot chown {owner.name}:{group.name} {path}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(path)) from exc

    def chmod(self, path: Path, mode: int) -> None:
        logger.debug("chmod %o %s", mode, path)
        try:
            path.chmod(mode)
        except OSError as exc:
            msg = f"Cannot chmod {mode:o} {path}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(path)) from exc

    def copy_file(self, src: Path, dst: Path) -> None:
        logger.debug("cp %s %s", src, dst)
        try:
            shutil.copyfile(src, dst)
        except OSError as exc:
            msg = f"Cannot copy {src} to {dst}: {exc.strerror or exc}"
            raise FilesystemError(msg, src=str(src), dst=str(dst)) from exc

    def write_file(self, path: Path, content: str) -> None:
        logger.debug("write %s (%d bytes)", path, len(content))
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write {path}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(path)) from exc

    def extract_tar(self, archive: Path, dest: Path) -> None:
        logger.debug("extract %s -> %s", archive, dest)
        if not archive.is_file():
            msg = f"Release archive not found: {archive}"
            raise ArchiveError(msg, archive=str(archive))
        try:
            with tarfile.open(archive, "r:gz") as tar:
                tar.extractall(dest, filter="data")
        except (tarfile.TarError, EOFError, OSError) as exc:
            msg = f"Cannot extract {archive}: {exc}"
            raise ArchiveError(msg, archive=str(archive)) from exc

    def remove_link(self, path: Path) -> None:
        logger.debug("rm %s", path)
        try:
            path.unlink()
        except OSError as exc:
            msg = f"Cannot remove link {path}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(path)) from exc

    def symlink(self, target: Path, link: Path) -> None:
        logger.debug("ln -s %s %s", target, link)
        try:
            link.symlink_to(target)
        except OSError as exc:
            msg = f"Cannot link {link} to {target}: {exc.strerror or exc}"
            raise FilesystemError(msg, path=str(link)) from exc

    def enable_unit(self, name: str) -> None:
        logger.debug("systemctl enable %s", name)
        try:
            subprocess.run(
                ["systemctl", "enable", name],
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            msg = "systemctl not found"
            raise CommandError(msg, unit=name) from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            msg = f"systemctl enable {name} failed (exit {exc.returncode})"
            if stderr:
                msg += f": {stderr}"
            raise CommandError(msg, unit=name) from exc


class DryRunExecutor(Executor):
    """Record the shell equivalent of every operation.

    Attributes:
        commands: Recorded lines in order. Notes appear as ``#`` comments,
            so the list joined with newlines is a runnable script.
    """

    dry_run = True

    def __init__(self) -> None:
        self.commands: list[str] = []

    def _emit(self, line: str) -> None:
        logger.debug("dry-run: %s", line)
        self.commands.append(line)

    def note(self, message: str) -> None:
        self._emit(f"# {message}")

    def make_dirs(self, path: Path) -> None:
        self._emit(f"mkdir -p {_q(path)}")

    def chown(self, path: Path, owner: Principal, group: Principal) -> None:
        self._emit(f"chown {_q(f'{owner.name}:{group.name}')} {_q(path)}")

    def chmod(self, path: Path, mode: int) -> None:
        self._emit(f"chmod {mode:o} {_q(path)}")

    def copy_file(self, src: Path, dst: Path) -> None:
        self._emit(f"cp {_q(src)} {_q(dst)}")

    def write_file(self, path: Path, content: str) -> None:
        body = content if content.endswith("\n") else content + "\n"
        self._emit(f"cat > {_q(path)} <<'{_HEREDOC_MARKER}'\n{body}{_HEREDOC_MARKER}")

    def extract_tar(self, archive: Path, dest: Path) -> None:
        self._emit(f"tar -xzf {_q(archive)} -C {_q(dest)}")

    def remove_link(self, path: Path) -> None:
        self._emit(f"rm {_q(path)}")

    def symlink(self, target: Path, link: Path) -> None:
        self._emit(f"ln -s {_q(target)} {_q(link)}")

    def enable_unit(self, name: str) -> None:
        self._emit(f"systemctl enable {_q(name)}")

    def script(self) -> str:
        """The recorded commands as a shell script body."""
        return "\n".join(self.commands)


def get_executor(*, exec_commands: bool) -> Executor:
    """Select the executor for this invocation."""
    return RealExecutor() if exec_commands else DryRunExecutor()
