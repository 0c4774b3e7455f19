"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Mapping

from flask import jsonify


class ApiError(Exception):
    """Error carrying the HTTP status and machine-readable code to return."""

    def __init__(self, status: int, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.status = int(status)
        self.message = message
        self.code = code or HTTPStatus(self.status).phrase.lower().replace(" ", "_")


def not_found(resource: str = "Resource") -> ApiError:
    return ApiError(HTTPStatus.NOT_FOUND, f"{resource} not found", "not_found")


def bad_request(message: str) -> ApiError:
    return ApiError(HTTPStatus.BAD_REQUEST, message, "bad_request")


@dataclass(frozen=True)
class ProblemResponse:
    """JSON error payload of the form ``{"error": code, "message": ...}``."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Convenience factory mirroring Flask's ``jsonify`` interface."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=int(status), message=message, extra=additional)


def problem_from_api_error(error: ApiError) -> ProblemResponse:
    return problem_response(error.code, status=error.status, message=error.message)


__all__ = [
    "ApiError",
    "ProblemResponse",
    "bad_request",
    "not_found",
    "problem_from_api_error",
    "problem_response",
]
