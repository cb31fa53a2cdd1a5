"""Middleware package for API request processing.

Request validation and every error path end in the JSON error handlers
registered here.
"""

from flask import Flask

from routerchat.src.api.middleware.error_handler import register_error_handlers


def register_middleware(app: Flask) -> None:
    """Register middleware with the Flask application.

    Args:
        app: Flask application
    """
    # flask_pydantic raises instead of answering with its own error body
    app.config["FLASK_PYDANTIC_VALIDATION_ERROR_RAISE"] = True

    register_error_handlers(app)
