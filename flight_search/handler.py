"""AWS Lambda-style handler for the flight search proxy."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from config.settings import get_settings
from flight_search.providers import build_provider
from flight_search.service import (
    REQUIRED_PARAMS,
    ConfigurationError,
    FlightSearchRequest,
    FlightSearchService,
    UpstreamError,
)
from shared.responses import error_response, json_response, preflight_response

logger = logging.getLogger(__name__)

_service: FlightSearchService | None = None


def _get_service() -> FlightSearchService:
    global _service
    if _service is None:
        try:
            settings = get_settings()
            logging.getLogger("flight_search").setLevel(settings.log_level.upper())
        except (ValidationError, ValueError) as exc:
            raise ConfigurationError(f"invalid settings: {exc}") from exc
        provider = build_provider(settings)
        _service = FlightSearchService(provider, max_results=settings.search_max_results)
    return _service


def _request_method(event: dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return (method or "GET").upper()


def _query_params(event: dict[str, Any]) -> dict[str, str]:
    params = event.get("queryStringParameters") or {}
    return {key: value for key, value in params.items() if value not in (None, "")}


def upstream_error_status(exc: UpstreamError) -> tuple[int, str]:
    """Translate an upstream failure into the status code and message shown to clients."""

    if exc.status_code == 401:
        return 500, "API authentication failed"
    if exc.status_code == 429:
        return 429, "Too many requests"
    if exc.detail:
        return 400, exc.detail
    return 500, "Failed to search for flights"


def lambda_handler(event: dict[str, Any], _context: Any | None = None) -> dict[str, Any]:
    """Entry point compatible with AWS Lambda (API Gateway proxy integration)."""

    method = _request_method(event)
    if method == "OPTIONS":
        return preflight_response()
    if method != "GET":
        return error_response(405, "Method not allowed")

    params = _query_params(event)
    missing = [name for name in REQUIRED_PARAMS if name not in params]
    if missing:
        logger.info("Rejected search without %s", ", ".join(missing))
        return error_response(400, f"Missing required parameters: {', '.join(REQUIRED_PARAMS)}")

    try:
        request = FlightSearchRequest.model_validate(params)
    except ValidationError as exc:
        logger.info("Invalid flight search parameters: %s", exc)
        return error_response(
            400,
            "Invalid search parameters",
            detail="; ".join(error["msg"] for error in exc.errors()),
        )

    try:
        response = _get_service().search(request)
    except ConfigurationError as exc:
        logger.error("Flight search misconfigured: %s", exc)
        return error_response(500, "Server configuration error")
    except UpstreamError as exc:
        logger.error("Flight search error: %s (%s)", exc, exc.payload if exc.payload is not None else "no body")
        status, message = upstream_error_status(exc)
        return error_response(status, message)
    except Exception:
        logger.exception("Unexpected flight search failure")
        return error_response(500, "Failed to search for flights")

    return json_response(200, response)


__all__ = ["lambda_handler", "upstream_error_status"]
