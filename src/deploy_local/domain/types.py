"""Value types shared across layers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class RestartMethod(StrEnum):
    """How a deployed service is restarted after a new release."""

    SYSTEMD_FLAG = "systemd_flag"
    SYSTEMCTL = "systemctl"
    TOUCH = "touch"


@dataclass(frozen=True)
class Principal:
    """An OS user or group: name plus numeric id.

    The id is ``None`` when it has not been looked up (dry-run mode only
    prints names).
    """

    name: str
    id: int | None = None


ROOT_USER = Principal("root", 0)
ROOT_GROUP = Principal("root", 0)


@dataclass(frozen=True)
class Owners:
    """The principals that own deployed files."""

    deploy_user: Principal
    deploy_group: Principal
    app_user: Principal
    app_group: Principal


@dataclass(frozen=True)
class DirectorySpec:
    """A directory that must exist with the given ownership and mode."""

    path: Path
    owner: Principal
    group: Principal
    mode: int
    description: str = ""
