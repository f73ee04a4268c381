"""Command line interface for the collrest demo server."""

from .main import app


__all__ = ["app"]
