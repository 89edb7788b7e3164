from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base error converted to a JSON response at the request boundary.

    ``payload`` is an optional fallback body (for example an empty list) that is
    returned verbatim instead of the standard error envelope.
    """

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload


class BadRequestError(GatewayError):
    status_code = 400
    code = "BAD_REQUEST"


class NotFoundError(GatewayError):
    status_code = 404
    code = "NOT_FOUND"


class ConfigurationError(GatewayError):
    status_code = 500
    code = "CONFIGURATION_ERROR"


class UpstreamError(GatewayError):
    status_code = 502
    code = "UPSTREAM_ERROR"

    def __init__(self, message: str, *, upstream_status: int | None = None) -> None:
        super().__init__(message, status_code=upstream_status or 502)
        self.upstream_status = upstream_status


class RetriesExhaustedError(UpstreamError):
    code = "UPSTREAM_THROTTLED"

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message, upstream_status=429)
        self.attempts = attempts


class UpstreamUnavailableError(GatewayError):
    code = "UPSTREAM_UNAVAILABLE"

    @classmethod
    def from_upstream(cls, error: UpstreamError, *, payload: Any = None) -> "UpstreamUnavailableError":
        return cls(error.message, status_code=error.status_code, payload=payload)
