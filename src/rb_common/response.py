"""Unified call result wrapper.

Every dispatched call returns this shape:
{
    "code": 0,            // 0=success, non-0=AppError code
    "kind": null,         // ErrorKind value on failure
    "message": "success",
    "data": { ... },      // null on failure
    "timestamp": "...",
    "call_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from src.rb_common.enums import ErrorKind


class CallResult(BaseModel):
    code: int = 0
    kind: ErrorKind | None = None
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    call_id: str = Field(default_factory=lambda: f"call_{uuid.uuid4().hex[:12]}")

    @property
    def ok(self) -> bool:
        return self.code == 0


def success_result(data: Any = None) -> CallResult:
    return CallResult(code=0, message="success", data=data)


def error_result(code: int, kind: ErrorKind, message: str) -> CallResult:
    return CallResult(code=code, kind=kind, message=message, data=None)
