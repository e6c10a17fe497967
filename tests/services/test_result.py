"""Tests for ServiceResult and ServiceError."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from deploy_local.errors import ArchiveError
from deploy_local.services.result import ServiceError, ServiceResult


class TestServiceError:
    def test_from_exception(self) -> None:
        err = ServiceError.from_exception(ArchiveError("Release archive not found", archive="/x"))
        assert err.code == "ARCHIVE_ERROR"
        assert err.message == "Release archive not found"
        assert err.detail == {"archive": "/x"}


class TestServiceResult:
    def test_defaults(self) -> None:
        result = ServiceResult(ok=True, op="deploy")
        assert result.data == {}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="deploy")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_json_dump(self) -> None:
        result = ServiceResult(
            ok=False,
            op="rollback",
            error=ServiceError(code="FILESYSTEM_ERROR", message="nope"),
        )
        dumped = result.model_dump()
        assert dumped["error"]["code"] == "FILESYSTEM_ERROR"
        assert dumped["ok"] is False
