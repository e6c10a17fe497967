"""Exception hierarchy for deploy-local.

Every failure is local and fatal to the current command: nothing is
retried and no partial state is cleaned up. Services translate these into
a failed :class:`~deploy_local.services.result.ServiceResult`, which the
CLI prints before exiting with status 1.
"""

from __future__ import annotations

from typing import Any


class DeployError(Exception):
    """Base class for all deploy-local failures."""

    code = "DEPLOY_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ConfigError(DeployError):
    """A required setting is missing or malformed."""

    code = "CONFIG_ERROR"


class FilesystemError(DeployError):
    """Creating, owning, copying, or linking a path failed."""

    code = "FILESYSTEM_ERROR"


class ArchiveError(DeployError):
    """The release archive is missing or cannot be extracted."""

    code = "ARCHIVE_ERROR"


class TemplateError(DeployError):
    """A template could not be found or rendered."""

    code = "TEMPLATE_ERROR"


class IdentityLookupError(DeployError):
    """An OS user or group could not be found."""

    code = "LOOKUP_ERROR"


class CommandError(DeployError):
    """An external command (``systemctl``, ``getent``, ``dscl``) failed."""

    code = "COMMAND_FAILED"
