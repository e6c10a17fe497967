"""OS user and group lookup.

Records are fetched in ``/etc/passwd`` / ``/etc/group`` line format so a
single parser serves every platform:

- Linux: ``getent passwd NAME`` / ``getent group NAME``
- Darwin: ``dscl . -read /Users/NAME KEY`` assembled into the same format
"""

from __future__ import annotations

import getpass
import grp
import logging
import os
import re
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from deploy_local.domain.types import Principal
from deploy_local.errors import CommandError, IdentityLookupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserInfo:
    """A passwd entry."""

    name: str
    uid: int
    gid: int
    gecos: str = ""
    home: str = ""
    shell: str = ""


@dataclass(frozen=True)
class GroupInfo:
    """A group entry."""

    name: str
    gid: int
    members: list[str] = field(default_factory=list)


def parse_passwd_record(record: str) -> UserInfo:
    """Parse ``name:pw:uid:gid:gecos:home:shell``.

    Examples:
        >>> parse_passwd_record("jake:x:1003:1005:ansible-jake:/home/jake:/bin/bash\\n").uid
        1003
    """
    parts = record.strip().split(":")
    if len(parts) != 7:
        msg = f"Malformed passwd record: {record.strip()!r}"
        raise IdentityLookupError(msg)
    name, _pw, uid, gid, gecos, home, shell = parts
    try:
        return UserInfo(name=name, uid=int(uid), gid=int(gid), gecos=gecos, home=home, shell=shell)
    except ValueError as exc:
        msg = f"Malformed passwd record: {record.strip()!r}"
        raise IdentityLookupError(msg) from exc


def parse_group_record(record: str) -> GroupInfo:
    """Parse ``name:pw:gid:member,member``."""
    parts = record.strip().split(":")
    if len(parts) != 4:
        msg = f"Malformed group record: {record.strip()!r}"
        raise IdentityLookupError(msg)
    name, _pw, gid, members = parts
    try:
        gid_value = int(gid)
    except ValueError as exc:
        msg = f"Malformed group record: {record.strip()!r}"
        raise IdentityLookupError(msg) from exc
    return GroupInfo(name=name, gid=gid_value, members=members.split(",") if members else [])


def _run(args: list[str]) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(args, capture_output=True, text=True, check=False)
    except FileNotFoundError as exc:
        msg = f"{args[0]} not found"
        raise CommandError(msg) from exc


class IdentityResolver(ABC):
    """Look up OS users and groups by name."""

    @abstractmethod
    def passwd_record(self, name: str) -> str:
        """Return the passwd-format line for user *name*."""

    @abstractmethod
    def group_record(self, name: str) -> str:
        """Return the group-format line for group *name*."""

    def user_info(self, name: str) -> UserInfo:
        return parse_passwd_record(self.passwd_record(name))

    def group_info(self, name: str) -> GroupInfo:
        return parse_group_record(self.group_record(name))

    def user(self, name: str, uid: int | None = None) -> Principal:
        """Principal for user *name*, looking up the uid unless given."""
        if uid is None:
            uid = self.user_info(name).uid
        return Principal(name, uid)

    def group(self, name: str, gid: int | None = None) -> Principal:
        """Principal for group *name*, looking up the gid unless given."""
        if gid is None:
            gid = self.group_info(name).gid
        return Principal(name, gid)


class LinuxIdentityResolver(IdentityResolver):
    """Lookups through ``getent`` (honors NSS: files, LDAP, sssd)."""

    def _getent(self, database: str, name: str) -> str:
        result = _run(["getent", database, name])
        if result.returncode != 0 or not result.stdout.strip():
            msg = f"No {'user' if database == 'passwd' else 'group'} named {name!r}"
            raise IdentityLookupError(msg, name=name)
        return result.stdout.splitlines()[0]

    def passwd_record(self, name: str) -> str:
        return self._getent("passwd", name)

    def group_record(self, name: str) -> str:
        return self._getent("group", name)


_WS = re.compile(r"\s+")


def parse_dscl_value(output: str) -> str:
    """Extract the value from ``dscl -read`` output (``Key: value``)."""
    parts = _WS.split(output.strip(), maxsplit=1)
    return parts[1] if len(parts) == 2 else ""


class DarwinIdentityResolver(IdentityResolver):
    """Lookups through Directory Services (``dscl``)."""

    _USER_KEYS = ("UniqueID", "PrimaryGroupID", "RealName", "NFSHomeDirectory", "UserShell")

    def _read(self, path: str, key: str) -> str:
        result = _run(["dscl", "-q", ".", "-read", path, key])
        if result.returncode != 0:
            msg = f"No directory entry {path} ({key})"
            raise IdentityLookupError(msg, path=path, key=key)
        return parse_dscl_value(result.stdout)

    def passwd_record(self, name: str) -> str:
        path = f"/Users/{name}"
        values = [self._read(path, key) for key in self._USER_KEYS]
        return ":".join([name, "x", *values])

    def group_record(self, name: str) -> str:
        path = f"/Groups/{name}"
        gid = self._read(path, "PrimaryGroupID")
        try:
            members = ",".join(_WS.split(self._read(path, "GroupMembership").strip()))
        except IdentityLookupError:
            members = ""
        return ":".join([name, "x", gid, members])


def get_identity_resolver(platform: str | None = None) -> IdentityResolver:
    """Pick the resolver for *platform* (default: ``sys.platform``)."""
    platform = platform or sys.platform
    if platform == "darwin":
        return DarwinIdentityResolver()
    if platform.startswith("linux"):
        return LinuxIdentityResolver()
    msg = f"Unsupported platform for user lookup: {platform}"
    raise IdentityLookupError(msg, platform=platform)


def current_identity() -> tuple[str | None, str]:
    """Names of the invoking user and their primary group.

    The user is None when the uid has no passwd entry and neither
    ``USER`` nor ``LOGNAME`` is set, as with arbitrary uids in containers.
    """
    try:
        user: str | None = getpass.getuser()
    except (KeyError, OSError):
        logger.debug("No user name for uid %d", os.getuid())
        user = None
    gid = os.getgid()
    try:
        group = grp.getgrgid(gid).gr_name
    except KeyError:
        logger.debug("No group entry for gid %d", gid)
        group = str(gid)
    return user, group
