"""API Gateway response helpers shared by the HTTP handlers."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}


def json_response(status_code: int, body: Any) -> dict[str, Any]:
    """Return an API Gateway proxy response with a JSON body and CORS headers."""

    if isinstance(body, BaseModel):
        body = body.model_dump(by_alias=True, exclude_none=True)
    headers = {"Content-Type": "application/json", **CORS_HEADERS}
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(body, default=str),
    }


def error_response(status_code: int, message: str, detail: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": message}
    if detail:
        body["detail"] = detail
    return json_response(status_code, body)


def preflight_response() -> dict[str, Any]:
    """Empty 200 answer for CORS preflight requests."""

    return {"statusCode": 200, "headers": dict(CORS_HEADERS), "body": ""}


__all__ = ["CORS_HEADERS", "error_response", "json_response", "preflight_response"]
