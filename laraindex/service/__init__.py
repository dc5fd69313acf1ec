"""HTTP query service over a project index."""

from .app import create_app, run_service

__all__ = ["create_app", "run_service"]
