"""Collection layer contracts and a reference in-memory implementation."""

from .inmem import InMemoryCollection, InMemoryCollectionFactory
from .protocol import (
    Collection,
    CollectionFactory,
    FieldDefinition,
    get_field_ref,
)


__all__ = [
    "Collection",
    "CollectionFactory",
    "FieldDefinition",
    "InMemoryCollection",
    "InMemoryCollectionFactory",
    "get_field_ref",
]
