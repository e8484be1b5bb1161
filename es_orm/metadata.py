"""Turn ``@document`` classes into metadata and index mappings."""

import importlib
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

from . import caser
from .annotations import DocumentAnnotation, Property, get_document_annotation, iter_properties
from .base import RESERVED_ATTRIBUTES
from .errors import (
    DocumentParserError,
    InvalidDocumentClassError,
    MissingDocumentAnnotationError,
    UnknownDocumentTypeError,
)

logger = logging.getLogger(__name__)

ClassName = Union[str, type]


@dataclass(frozen=True)
class FieldMetadata:
    attribute: str
    name: str
    declaration: Property


@dataclass(frozen=True)
class DocumentMetadata:
    document_class: type
    type: str
    annotation: DocumentAnnotation
    fields: tuple[FieldMetadata, ...]

    def get_mapping(self) -> dict[str, Any]:
        mapping = self.annotation.dump()
        mapping["properties"] = {field.name: field.declaration.mapping() for field in self.fields}
        return mapping


def load_class(class_name: ClassName) -> type:
    """Resolve a class or an import path (``pkg.mod:Class`` or ``pkg.mod.Class``)."""
    if inspect.isclass(class_name):
        return class_name
    if not isinstance(class_name, str):
        raise TypeError(f"Class name must be a string or a class, got {type(class_name).__name__}.")

    module_name, sep, attribute = class_name.partition(":")
    if not sep:
        module_name, _, attribute = class_name.rpartition(".")
    if not module_name or not attribute:
        raise InvalidDocumentClassError(f'Cannot load class from "{class_name}".')

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise InvalidDocumentClassError(
            f'Cannot create repository for non-existing class "{class_name}".'
        ) from exc

    loaded = getattr(module, attribute, None)
    if not inspect.isclass(loaded):
        raise InvalidDocumentClassError(
            f'Cannot create repository for non-existing class "{class_name}".'
        )
    return loaded


def parse_document(cls: type) -> DocumentMetadata:
    annotation = get_document_annotation(cls)
    if annotation is None:
        raise MissingDocumentAnnotationError(
            f"{cls.__module__}.{cls.__qualname__} is not decorated with @document."
        )

    fields: list[FieldMetadata] = []
    names: dict[str, str] = {}
    for attribute, declaration in iter_properties(cls):
        if attribute in RESERVED_ATTRIBUTES:
            raise DocumentParserError(
                f"{cls.__qualname__}.{attribute}: {attribute!r} is reserved for hit metadata."
            )
        name = declaration.field_name(attribute)
        if name in names:
            raise DocumentParserError(
                f"{cls.__qualname__}: field {name!r} is declared by both "
                f"{names[name]!r} and {attribute!r}."
            )
        names[name] = attribute
        fields.append(FieldMetadata(attribute, name, declaration))

    return DocumentMetadata(
        document_class=cls,
        type=annotation.type or caser.snake(cls.__name__),
        annotation=annotation,
        fields=tuple(fields),
    )


class MetadataCollector:
    """Registry of document classes known to a manager."""

    def __init__(self, documents: Iterable[ClassName] = ()):
        self._by_class: dict[type, DocumentMetadata] = {}
        self._by_type: dict[str, DocumentMetadata] = {}
        for document_class in documents:
            self.register(document_class)

    def register(self, class_name: ClassName) -> DocumentMetadata:
        cls = load_class(class_name)
        if cls in self._by_class:
            return self._by_class[cls]

        metadata = parse_document(cls)
        existing = self._by_type.get(metadata.type)
        if existing is not None:
            raise DocumentParserError(
                f"Document type {metadata.type!r} is already mapped to "
                f"{existing.document_class.__qualname__}."
            )

        self._by_class[cls] = metadata
        self._by_type[metadata.type] = metadata
        logger.debug("Registered document %s as type %s", cls.__qualname__, metadata.type)
        return metadata

    def resolve_class(self, class_name: ClassName) -> type:
        """Registered type names win over import paths."""
        if isinstance(class_name, str) and class_name in self._by_type:
            return self._by_type[class_name].document_class
        return load_class(class_name)

    def get_metadata(self, class_name: ClassName) -> DocumentMetadata:
        cls = self.resolve_class(class_name)
        metadata = self._by_class.get(cls)
        if metadata is None:
            metadata = self.register(cls)
        return metadata

    def get_metadata_by_type(self, document_type: str) -> DocumentMetadata:
        try:
            return self._by_type[document_type]
        except KeyError:
            raise UnknownDocumentTypeError(document_type) from None

    def has_type(self, document_type: Optional[str]) -> bool:
        return document_type in self._by_type

    def get_document_type(self, class_name: ClassName) -> str:
        return self.get_metadata(class_name).type

    def get_class_by_type(self, document_type: str) -> type:
        return self.get_metadata_by_type(document_type).document_class

    def get_mapping(self, class_name: ClassName) -> dict[str, Any]:
        return self.get_metadata(class_name).get_mapping()

    def get_mappings(self) -> dict[str, dict[str, Any]]:
        return {document_type: meta.get_mapping() for document_type, meta in self._by_type.items()}

    @property
    def types(self) -> list[str]:
        return list(self._by_type)
