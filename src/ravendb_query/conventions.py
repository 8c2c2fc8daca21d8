"""
DocumentConventions — raw JSON <-> typed entity conversion rules.

Queries consult the conventions for three things: the identity property of
a document type, how to pull results/includes out of a response envelope,
and how to turn one raw document into a typed entity.  Conversion uses
pydantic: ``BaseModel`` subclasses go through ``model_validate``, any other
target type through a ``TypeAdapter``; documents without a known type stay
plain dicts.
"""

from __future__ import annotations

import copy
import datetime
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from .exceptions import ConversionError, InvalidArgumentError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALL_DOCS = "@all_docs"
EMPTY_COLLECTION = "@empty"
METADATA_KEY = "@metadata"

DocumentType = type[Any] | str
NestedObjectTypes = Mapping[str, DocumentType]

# Names accepted in ``nested_object_types`` for date fields
_DATE_TYPE_NAMES = frozenset({"date", "datetime"})


def default_document_type_name(collection_name: str) -> str:
    """
    Singular, capitalised type name for a collection (``"Products"`` →
    ``"Product"``).

    Only handles regular English plurals; swap in a proper inflection
    library through ``DocumentConventions.document_type_name_resolver``.
    """
    name = collection_name
    lower = name.lower()
    if lower.endswith("ies") and len(name) > 3:
        name = name[:-3] + "y"
    elif lower.endswith(("sses", "xes", "ches", "shes")):
        name = name[:-2]
    elif lower.endswith("s") and not lower.endswith("ss"):
        name = name[:-1]
    return name[:1].upper() + name[1:]


@dataclass
class DocumentConversionResult(Generic[T]):
    """A converted entity together with the raw document it came from."""

    document: T
    raw_entity: dict[str, Any]
    metadata: dict[str, Any] = field(default_factory=dict)
    original_metadata: dict[str, Any] = field(default_factory=dict)
    document_type: str | None = None

    @property
    def document_id(self) -> str | None:
        return self.metadata.get("@id")


class DocumentConventions:
    """Conversion and naming rules shared by a session and its queries."""

    def __init__(
        self,
        id_property_name: str = "id",
        document_type_name_resolver: Callable[[str], str] | None = None,
    ) -> None:
        self.default_id_property_name = id_property_name
        self.document_type_name_resolver = (
            document_type_name_resolver or default_document_type_name
        )
        self._document_types: dict[str, type[Any]] = {}
        self._id_properties: dict[type[Any], str] = {}

    @property
    def all_docs(self) -> str:
        return ALL_DOCS

    @property
    def empty_collection(self) -> str:
        return EMPTY_COLLECTION

    # -- registration --------------------------------------------------------

    def register_document_type(
        self, document_type: type[Any], name: str | None = None
    ) -> None:
        """Make *document_type* resolvable by *name* (defaults to the class name)."""
        self._document_types[name or document_type.__name__] = document_type

    def register_id_property(self, document_type: type[Any], property_name: str) -> None:
        self._id_properties[document_type] = property_name

    # -- type resolution -----------------------------------------------------

    def resolve_document_type(self, document_type: DocumentType | None) -> type[Any] | None:
        """A registered class for a type name, the class itself, or ``None``."""
        if document_type is None:
            return None
        if isinstance(document_type, str):
            return self._document_types.get(document_type)
        return document_type

    def get_document_type_name(self, collection_name: str) -> str:
        return self.document_type_name_resolver(collection_name)

    def get_id_property_name(self, document_type: DocumentType | None = None) -> str:
        resolved = self.resolve_document_type(document_type)
        if resolved is not None and resolved in self._id_properties:
            return self._id_properties[resolved]
        return self.default_id_property_name

    # -- response envelope ---------------------------------------------------

    def try_fetch_results(self, response: Mapping[str, Any] | None) -> list[dict[str, Any]]:
        if not response:
            return []
        results = response.get("Results")
        return list(results) if isinstance(results, list) else []

    def try_fetch_includes(self, response: Mapping[str, Any] | None) -> list[dict[str, Any]]:
        """Include documents as a list; a by-id mapping yields its values."""
        if not response:
            return []
        includes = response.get("Includes")
        if isinstance(includes, Mapping):
            return list(includes.values())
        if isinstance(includes, list):
            return list(includes)
        return []

    def check_is_projection(self, raw_entity: Mapping[str, Any]) -> bool:
        metadata = raw_entity.get(METADATA_KEY)
        if not isinstance(metadata, Mapping):
            return False
        return metadata.get("@projection") is True

    # -- conversion ----------------------------------------------------------

    def convert_to_document(
        self,
        raw_entity: Mapping[str, Any],
        document_type: DocumentType | None = None,
        nested_object_types: NestedObjectTypes | None = None,
    ) -> DocumentConversionResult[Any]:
        """
        Convert one raw document to its target type.

        The document id from ``@metadata.@id`` is copied onto the id
        property when the raw body does not carry it.  Fields listed in
        *nested_object_types* are converted first (each element for
        lists), so plain dict targets still get typed nested values.

        Raises:
            ConversionError: If the document does not validate against the
                target type.
        """
        if not isinstance(raw_entity, Mapping):
            raise InvalidArgumentError(
                f"Expected a raw document mapping, got {type(raw_entity).__name__}"
            )

        metadata = dict(raw_entity.get(METADATA_KEY) or {})
        original_metadata = copy.deepcopy(metadata)
        target = self.resolve_document_type(document_type)
        type_name = _type_name(document_type, target, metadata)

        data = {key: value for key, value in raw_entity.items() if key != METADATA_KEY}
        id_property = self.get_id_property_name(target)
        document_id = metadata.get("@id")
        if document_id is not None and data.get(id_property) is None:
            data[id_property] = document_id

        try:
            for field_name, nested_type in (nested_object_types or {}).items():
                if data.get(field_name) is not None:
                    data[field_name] = self._convert_nested(
                        data[field_name], nested_type
                    )
            document = self._validate(target, data)
        except ValidationError as e:
            raise ConversionError(
                f"Could not convert document {document_id or '<no id>'} "
                f"to {type_name or 'dict'}: {e}"
            ) from e

        return DocumentConversionResult(
            document=document,
            raw_entity=dict(raw_entity),
            metadata=metadata,
            original_metadata=original_metadata,
            document_type=type_name,
        )

    def _convert_nested(self, value: Any, nested_type: DocumentType) -> Any:
        if isinstance(value, list):
            return [self._convert_nested(item, nested_type) for item in value]
        if isinstance(nested_type, str) and nested_type.lower() in _DATE_TYPE_NAMES:
            return TypeAdapter(datetime.datetime).validate_python(value)
        target = self.resolve_document_type(nested_type)
        if target is None:
            logger.debug("Unknown nested object type %r, value left as is", nested_type)
            return value
        return self._validate(target, value)

    @staticmethod
    def _validate(target: type[Any] | None, data: Any) -> Any:
        if target is None or target is dict:
            return data
        if isinstance(target, type) and issubclass(target, BaseModel):
            return target.model_validate(data)
        return TypeAdapter(target).validate_python(data)


def _type_name(
    document_type: DocumentType | None,
    target: type[Any] | None,
    metadata: Mapping[str, Any],
) -> str | None:
    if isinstance(document_type, str):
        return document_type
    if target is not None:
        return target.__name__
    return metadata.get("Raven-Python-Type") or metadata.get("@collection")
