# src/utils/errors.py
"""
Error types shared by the services, the FastAPI gateway and the Streamlit pages.

Services raise these; the gateway maps them to JSON responses
(status_code + to_payload()), pages show `str(err)`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ServiceError(Exception):
    status_code: int = 500
    payload_key: str = "error"

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {self.payload_key: self.message}
        if self.details is not None:
            out["details"] = self.details
        return out


class BadRequest(ServiceError):
    status_code = 400


class AuthRequired(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404
    payload_key = "message"


class UpstreamError(ServiceError):
    """A third-party API failed. status_code is the upstream status when passed through."""
    status_code = 502


class ServiceUnavailable(ServiceError):
    status_code = 503


class ConfigError(ServiceError, RuntimeError):
    """Missing secret / misconfiguration."""
    status_code = 500
