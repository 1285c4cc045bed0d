"""
JSON response envelope shared by all endpoints:

    {"success": bool, "message": str, "data" | "errors": ..., "count"?: int}
"""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """
    Raised by services; `main.py` turns it into an error envelope.
    """

    def __init__(self, status_code: int, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors


def envelope(
    *,
    success: bool,
    message: str = "",
    data: Any = None,
    errors: list[str] | None = None,
    count: int | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "message": message}
    if count is not None:
        body["count"] = count
    if errors is not None:
        body["errors"] = errors
    elif data is not None:
        body["data"] = data
    return body


def error_envelope(exc: ApiError) -> dict[str, Any]:
    return envelope(success=False, message=exc.message, errors=exc.errors)
