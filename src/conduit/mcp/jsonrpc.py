"""JSON-RPC 2.0 envelope helpers."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

JSONRPC_VERSION = "2.0"


class ErrorCode(IntEnum):
    """Error codes returned in JSON-RPC error objects."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INTERNAL_ERROR = -32603
    SERVER_NOT_INITIALIZED = -32002


def request_id(message: Any) -> Any:
    """The message's ``id``, or ``None`` when absent or undeterminable."""
    if isinstance(message, dict):
        return message.get("id")
    return None


def is_valid_envelope(message: Any) -> bool:
    return isinstance(message, dict) and message.get("jsonrpc") == JSONRPC_VERSION


def success(msg_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "result": result}


def error(msg_id: Any, code: ErrorCode, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "error": {"code": int(code), "message": message},
    }


def invalid_request(message: Any) -> dict[str, Any]:
    return error(request_id(message), ErrorCode.INVALID_REQUEST, "Invalid JSON-RPC request")


def parse_error() -> dict[str, Any]:
    return error(None, ErrorCode.PARSE_ERROR, "Parse error")


def internal_error(message: Any) -> dict[str, Any]:
    return error(request_id(message), ErrorCode.INTERNAL_ERROR, "Internal server error")
