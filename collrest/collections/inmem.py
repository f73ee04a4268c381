"""
An implementation of the collection protocols based on simple in-memory
dictionaries.

This is provided primarily for testing purposes and for the demo server; it
does no indexing and keeps nothing across restarts.
"""

import copy
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from collrest.core.errors import DocumentValidationError

from .protocol import FieldDefinition, get_field_ref


ID_FIELD = "_id"


class InMemoryCollection:
    """A collection whose documents live in a dict keyed by id."""

    def __init__(
        self, name: str, model_name: str, fields: Mapping[str, Any]
    ) -> None:
        self._name = name
        self._model_name = model_name
        self._fields: dict[str, FieldDefinition] = {}
        for key, spec in fields.items():
            if isinstance(spec, FieldDefinition):
                self._fields[key] = spec
            else:
                self._fields[key] = FieldDefinition.model_validate(
                    {"name": key, **dict(spec)}
                )
        self._docs: dict[str, dict[str, Any]] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def population_fields(self) -> list[str]:
        return [key for key, f in self._fields.items() if get_field_ref(f)]

    def get_fields(self) -> dict[str, FieldDefinition]:
        return dict(self._fields)

    def cast_id(self, value: Any) -> str:
        """Normalize an id to a 32 character hex string.

        Raises:
            ValueError: If ``value`` is not a valid id
        """
        return uuid.UUID(hex=str(value)).hex

    def _validate(self, data: Any, partial: bool = False) -> dict[str, Any]:
        if not isinstance(data, Mapping):
            raise DocumentValidationError(
                {"document": "must be an object"}, "Document must be an object"
            )
        errors: dict[str, str] = {}
        if not partial:
            for key, f in self._fields.items():
                if f.required and data.get(key) in (None, ""):
                    errors[key] = f"Path `{key}` is required."
        if errors:
            raise DocumentValidationError(errors)
        return dict(data)

    @staticmethod
    def _matches(doc: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
        for key, expected in query.items():
            actual = doc.get(key)
            if actual != expected and str(actual) != str(expected):
                return False
        return True

    async def read(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        query = query or {}
        return [
            copy.deepcopy(doc)
            for doc in self._docs.values()
            if self._matches(doc, query)
        ]

    async def read_by_id(
        self, document_id: Any, field: str | None = None
    ) -> dict[str, Any] | None:
        doc = self._docs.get(str(document_id))
        return copy.deepcopy(doc) if doc is not None else None

    async def create(self, data: Any) -> dict[str, Any]:
        doc = self._validate(data)
        doc[ID_FIELD] = str(doc.get(ID_FIELD) or uuid.uuid4().hex)
        if doc[ID_FIELD] in self._docs:
            raise DocumentValidationError(
                {ID_FIELD: "duplicate key"}, f"Duplicate id {doc[ID_FIELD]}"
            )
        self._docs[doc[ID_FIELD]] = doc
        return copy.deepcopy(doc)

    async def update(self, documents: Sequence[Any]) -> list[dict[str, Any]]:
        if not isinstance(documents, Sequence) or isinstance(documents, (str, bytes)):
            raise DocumentValidationError(
                {"documents": "must be a list"}, "Bulk update expects a list of documents"
            )
        # validate everything before touching storage
        pending = []
        for data in documents:
            doc = self._validate(data, partial=True)
            doc_id = str(doc.get(ID_FIELD, ""))
            if doc_id not in self._docs:
                raise DocumentValidationError(
                    {ID_FIELD: "unknown document"}, f"Could not find document with id {doc_id}"
                )
            pending.append((doc_id, doc))

        updated = []
        for doc_id, doc in pending:
            self._docs[doc_id].update(doc)
            updated.append(copy.deepcopy(self._docs[doc_id]))
        return updated

    async def update_by_id(self, document_id: Any, data: Any) -> dict[str, Any] | None:
        changes = self._validate(data, partial=True)
        changes.pop(ID_FIELD, None)
        doc = self._docs.get(str(document_id))
        if doc is None:
            return None
        doc.update(changes)
        return copy.deepcopy(doc)

    async def delete(self) -> None:
        self._docs.clear()

    async def delete_by_id(self, document_id: Any) -> dict[str, Any] | None:
        return self._docs.pop(str(document_id), None)


class InMemoryCollectionFactory:
    """Builds and holds :class:`InMemoryCollection` instances.

    ``definitions`` maps each collection name to a mapping with a
    ``model_name`` (defaults to the capitalized name) and a ``fields`` table.
    """

    def __init__(self, definitions: Mapping[str, Mapping[str, Any]]) -> None:
        self._collections: dict[str, InMemoryCollection] = {}
        for name, definition in definitions.items():
            self._collections[name] = InMemoryCollection(
                name,
                definition.get("model_name", name.capitalize()),
                definition.get("fields", {}),
            )

    @property
    def collections(self) -> dict[str, InMemoryCollection]:
        return dict(self._collections)

    def get_instance(self, name: str) -> InMemoryCollection | None:
        return self._collections.get(name)

    def get_instance_with_model(self, model_name: str) -> InMemoryCollection | None:
        for coll in self._collections.values():
            if coll.model_name == model_name:
                return coll
        return None
