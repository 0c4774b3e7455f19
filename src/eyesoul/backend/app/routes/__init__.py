"""Blueprint registrations for application routes."""

from flask import Flask

from .collections import blueprint as collections_blueprint
from .content import blueprint as content_blueprint


def register_routes(app: Flask) -> None:
    """Register all Flask blueprints with the provided application."""

    app.register_blueprint(collections_blueprint)
    app.register_blueprint(content_blueprint)
