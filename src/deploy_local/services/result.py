"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: every public service operation returns a ServiceResult; a
``DeployError`` raised inside a service never escapes it.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from deploy_local.errors import DeployError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: DeployError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=exc.detail)


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"deploy"``, ``"rollback"``, ``"init"``).
        data: Operation-specific payload. In dry-run mode it carries the
            recorded shell ``commands``.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (mode, timing).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
