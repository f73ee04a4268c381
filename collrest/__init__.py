"""REST CRUD plugin for collection-based content management hosts."""

from ._version import __version__
from .controller import Controller
from .plugin import CollectionRestPlugin


__all__ = ["__version__", "Controller", "CollectionRestPlugin"]
