"""Map Python classes onto Elasticsearch documents and query them through repositories."""

from .aggregations import AggregationIterator, AggregationPath, Bucket, ValueAggregation
from .annotations import FIELD_TYPES, DocumentAnnotation, Property, document
from .base import Document
from .client import create_client
from .errors import (
    AggregationLookupError,
    DocumentParserError,
    EsOrmError,
    InvalidDocumentClassError,
    MissingDocumentAnnotationError,
    UnknownDocumentTypeError,
)
from .manager import Manager
from .metadata import DocumentMetadata, FieldMetadata, MetadataCollector
from .repository import Repository
from .results import Converter, DocumentIterator, RawIterator, ResultKind
from .settings import ConnectionConfig, load_config

__all__ = [
    # client
    "create_client",
    # config
    "ConnectionConfig",
    "load_config",
    # declarations
    "document",
    "Document",
    "DocumentAnnotation",
    "Property",
    "FIELD_TYPES",
    # metadata
    "MetadataCollector",
    "DocumentMetadata",
    "FieldMetadata",
    # services
    "Manager",
    "Repository",
    # results
    "ResultKind",
    "Converter",
    "DocumentIterator",
    "RawIterator",
    "AggregationIterator",
    "AggregationPath",
    "Bucket",
    "ValueAggregation",
    # errors
    "EsOrmError",
    "DocumentParserError",
    "MissingDocumentAnnotationError",
    "InvalidDocumentClassError",
    "UnknownDocumentTypeError",
    "AggregationLookupError",
]
