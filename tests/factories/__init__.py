"""Test factories for creating host applications with the plugin mounted.

This module provides factory patterns to avoid one fixture per combination
of path style, authentication and base path.
"""

from .app_factory import RestAppFactory


__all__ = [
    "RestAppFactory",
]
