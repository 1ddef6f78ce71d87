"""JSON-RPC 2.0 envelopes for the stdio protocol."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

JSONRPC_VERSION = "2.0"

RequestId = int | str | None


class JsonRpcRequest(BaseModel):
    """An incoming request or notification.

    A message without an ``id`` key is a notification and gets no reply.
    """

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    method: StrictStr
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


def success_response(request_id: RequestId, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: RequestId, code: int, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


__all__ = [
    "JSONRPC_VERSION",
    "JsonRpcRequest",
    "RequestId",
    "error_response",
    "success_response",
]
