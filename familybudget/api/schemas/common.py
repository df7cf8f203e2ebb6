from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ResponseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", from_attributes=True)


class ApiErrorModel(ResponseModel):
    code: str
    message: str
    details: Any | None = None


class ApiErrorEnvelope(ResponseModel):
    error: ApiErrorModel
    request_id: str


def err(
    *,
    request_id: str,
    code: str,
    message: str,
    details: Any | None = None,
) -> dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
        },
        "request_id": request_id,
    }
