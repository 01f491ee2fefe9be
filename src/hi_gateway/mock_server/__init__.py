"""Mock registry endpoint for local testing."""

from .app import app, run_server

__all__ = ["app", "run_server"]
