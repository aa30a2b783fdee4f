"""Pipeline outcome values. The processor returns these instead of raising."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

__all__ = ["Error", "ErrorCode", "PipelineResult", "Success"]


class ErrorCode(str, Enum):
    """Failed pipeline step. UNAUTHORIZED is never worth retrying."""

    UNAUTHORIZED = "UNAUTHORIZED"
    STAGE1_FAILED = "STAGE1_FAILED"
    STAGE2_FAILED = "STAGE2_FAILED"
    CLAIM_FAILED = "CLAIM_FAILED"

    @property
    def retryable(self) -> bool:
        return self is not ErrorCode.UNAUTHORIZED


@dataclass(frozen=True)
class Success:
    identity_key: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "identity_key": self.identity_key, "data": dict(self.data)}


@dataclass(frozen=True)
class Error:
    identity_key: str
    code: ErrorCode
    message: str

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": False,
            "identity_key": self.identity_key,
            "code": self.code.value,
            "message": self.message,
        }


PipelineResult = Union[Success, Error]
