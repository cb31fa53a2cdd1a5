"""API package for the chat service.

This package contains the API endpoints, middleware and utilities for the
chat service.
"""

from .core import setup_api

__all__ = ["setup_api"]
