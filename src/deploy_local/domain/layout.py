"""On-disk layout rules for a deployed application.

Layout under the deploy root ``D``::

    D/releases/<timestamp>/   extracted release contents
    D/current -> releases/<ts>
    D/scripts/                rendered helper scripts
    D/flags/                  touched externally to trigger restarts
"""

from __future__ import annotations

from pathlib import Path

RELEASES_DIR = "releases"
SCRIPTS_DIR = "scripts"
FLAGS_DIR = "flags"
CURRENT_LINK = "current"

# Directories systemd creates itself (RuntimeDirectory= and friends)
# starting with this version.
SYSTEMD_MANAGED_DIRS_VERSION = 235

# Category directories: name -> default base prefix.
CATEGORY_BASES: dict[str, str] = {
    "runtime": "/run",
    "conf": "/etc",
    "logs": "/var/log",
    "tmp": "/var/tmp",
    "state": "/var/lib",
    "cache": "/var/cache",
}


def ext_name_for(app_name: str) -> str:
    """External (service/directory) name for an application.

    Every underscore becomes a hyphen; nothing else changes.

    Examples:
        >>> ext_name_for("my_app_name")
        'my-app-name'
    """
    return app_name.replace("_", "-")


def release_archive_path(build_path: Path, app_name: str, version: str) -> Path:
    """Location of the packaged release tarball inside the build tree."""
    return build_path / "rel" / app_name / "releases" / version / f"{app_name}.tar.gz"


def anchor(path: Path, root: Path) -> Path:
    """Make *path* absolute by anchoring relative values at *root*."""
    return path if path.is_absolute() else root / path
