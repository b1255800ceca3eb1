"""Debug logging utilities."""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("py_eventcal")
rtdb_logger = logging.getLogger("py_eventcal.rtdb")


def log_rtdb_request(method: str, url: str, params: dict[str, Any], body: Any) -> None:
    """Log an outgoing Realtime Database request in JSON format.

    Args:
        method: HTTP method
        url: Request URL path
        params: Query parameters (auth already removed)
        body: Request body (dict, list, or None)
    """
    request_data: dict[str, Any] = {
        "type": "request",
        "method": method,
        "url": url,
    }

    if params:
        request_data["params"] = params

    if body is not None:
        request_data["body"] = body

    rtdb_logger.info(json.dumps(request_data, indent=2, ensure_ascii=False, default=str))


def log_rtdb_response(status_code: int, body: Any) -> None:
    """Log an incoming Realtime Database response in JSON format.

    Args:
        status_code: HTTP status code
        body: Response body (dict, list, or None)
    """
    response_data: dict[str, Any] = {
        "type": "response",
        "status_code": status_code,
    }

    if body is not None:
        response_data["body"] = body

    rtdb_logger.info(json.dumps(response_data, indent=2, ensure_ascii=False, default=str))


def _attach_console_handler(target: logging.Logger) -> None:
    target.setLevel(logging.DEBUG)

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)

    # Messages are already formatted JSON
    handler.setFormatter(logging.Formatter("%(message)s"))

    target.addHandler(handler)

    # Keep dumps out of the root handlers
    target.propagate = False


def setup_debug_logging() -> None:
    """Configure debug logging for the calendar core."""
    _attach_console_handler(logger)


def setup_rtdb_debug_logging() -> None:
    """Configure debug logging for Realtime Database requests/responses."""
    _attach_console_handler(rtdb_logger)
