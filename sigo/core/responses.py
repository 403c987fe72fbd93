"""
Uniform response envelope.

Every endpoint answers `{success, data?, message?, error?}` so callers
can branch solely on `success`.  Failures are rendered by the exception
handlers in `sigo.main`; this module only builds the success side.
"""

from typing import Any


def ok(data: Any = None, message: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body


def fail(message: str, error: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if error:
        body["error"] = error
    return body
