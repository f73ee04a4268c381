"""Protocols for the collection layer provided by the host application.

The plugin never touches storage itself; it only calls the operations below
on objects the host hands it.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class FieldDefinition(BaseModel):
    """Declared metadata for a single collection field."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    label: str | None = None
    schema_type: str = Field(default="String", alias="schemaType")
    required: bool = False
    ref: str | None = Field(
        default=None,
        description="Model name of the collection this field references",
    )


def get_field_ref(field: Any) -> str | None:
    """Return the model name a reference field points at.

    Accepts :class:`FieldDefinition` instances as well as plain mappings
    with either a ``ref`` key or a ``type`` list wrapping one, e.g.
    ``{"type": [{"ref": "User"}]}``.
    """
    if isinstance(field, Mapping):
        ref = field.get("ref")
        if ref is None:
            inner = field.get("type")
            if isinstance(inner, Sequence) and not isinstance(inner, str) and inner:
                return get_field_ref(inner[0])
        return ref
    return getattr(field, "ref", None)


@runtime_checkable
class Collection(Protocol):
    """A named group of documents with a declared field schema."""

    @property
    def name(self) -> str:
        """Collection name."""
        ...

    @property
    def model_name(self) -> str:
        """Name of the model backing the collection."""
        ...

    @property
    def population_fields(self) -> Sequence[str]:
        """Names of fields that reference documents in other collections."""
        ...

    def get_fields(self) -> Mapping[str, Any]:
        """Field name to field definition map."""
        ...

    async def read(self, query: Mapping[str, Any]) -> list[Any]:
        """Return the documents matching ``query``."""
        ...

    async def read_by_id(self, document_id: Any, field: str | None = None) -> Any:
        """Return a single document, or None if there is no match."""
        ...

    async def create(self, data: Any) -> Any:
        """Create a document; raise on validation failure."""
        ...

    async def update(self, documents: Sequence[Any]) -> list[Any]:
        """Update many documents, returned in submission order."""
        ...

    async def update_by_id(self, document_id: Any, data: Any) -> Any:
        """Update a single document and return it."""
        ...

    async def delete(self) -> None:
        """Delete every document in the collection."""
        ...

    async def delete_by_id(self, document_id: Any) -> Any:
        """Delete a single document and return it, or None if missing."""
        ...


@runtime_checkable
class CollectionFactory(Protocol):
    """Resolves collection names and model names to collection handles."""

    @property
    def collections(self) -> Mapping[str, Collection]:
        """Every registered collection keyed by name."""
        ...

    def get_instance(self, name: str) -> Collection | None:
        """Return the collection registered under ``name``."""
        ...

    def get_instance_with_model(self, model_name: str) -> Collection | None:
        """Return the collection backed by the model ``model_name``."""
        ...
