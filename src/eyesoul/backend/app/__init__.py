"""Application factory for the Eyesoul client-state backend."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from pydantic import ValidationError
from werkzeug.exceptions import BadRequest

from eyesoul.backend.config import load_configuration, persist_delay_seconds
from eyesoul.backend.version import get_project_version

from .http import ApiError, problem_from_api_error, problem_response
from .models import validation_issues
from .routes import register_routes
from .routes.collections import REGISTRY_EXTENSION
from .services.collections import UnsupportedActionError
from .services.registry import CollectionRegistry
from .services.storage import InMemoryStorage, KeyValueStorage, SQLiteStorage

ALLOWED_ORIGINS_ENV = "EYESOUL_ALLOWED_ORIGINS"
STORAGE_DB_ENV = "EYESOUL_STORAGE_DB"

logger = logging.getLogger(__name__)


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def _build_storage() -> KeyValueStorage:
    db_path = os.getenv(STORAGE_DB_ENV)
    if db_path:
        logger.info("Persisting client collections to %s", db_path)
        return SQLiteStorage(Path(db_path).expanduser())
    return InMemoryStorage()


def _build_registry() -> CollectionRegistry:
    configuration = load_configuration()
    return CollectionRegistry(
        _build_storage(),
        configuration,
        persist_delay=persist_delay_seconds(configuration),
    )


def create_app(registry: CollectionRegistry | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)

    allowed_origins = _parse_allowed_origins(os.getenv(ALLOWED_ORIGINS_ENV))
    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Accept-Language", "X-Client-Id"],
    )

    app.extensions[REGISTRY_EXTENSION] = registry if registry is not None else _build_registry()
    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        configuration = load_configuration()
        return jsonify(
            {
                "status": "ok",
                "version": get_project_version(),
                "locales": list(configuration.locales.supported),
                "default_locale": configuration.locales.default,
            }
        )

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        return problem_from_api_error(error).to_response()

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """Surface pydantic validation issues to clients."""

        return problem_response(
            "validation_failed",
            status=400,
            message="Validation failed",
            issues=validation_issues(error),
        ).to_response()

    @app.errorhandler(UnsupportedActionError)
    def handle_unsupported_action(error: UnsupportedActionError):
        return problem_response(
            "method_not_allowed", status=405, message=str(error)
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface domain validation errors to clients."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app


__all__ = ["create_app", "ALLOWED_ORIGINS_ENV", "STORAGE_DB_ENV"]
