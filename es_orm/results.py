"""Materialisation of search responses."""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterator, Optional, Sequence

from .aggregations import AggregationIterator
from .errors import UnknownDocumentTypeError
from .metadata import MetadataCollector


class ResultKind(str, Enum):
    """Output shapes a search can be rendered as."""

    OBJECT = "object"
    ARRAY = "array"
    RAW = "raw"
    RAW_ITERATOR = "raw_iterator"


def response_body(response: Any) -> Any:
    """Plain body of a client response (elasticsearch 8 wraps it)."""
    return getattr(response, "body", response)


class Converter:
    """Converts hits into document objects and documents into ``_source`` dicts."""

    def __init__(self, metadata_collector: MetadataCollector):
        self._metadata = metadata_collector

    def resolve_type(self, hit: Mapping, types: Sequence[str] = ()) -> str:
        hit_type = hit.get("_type")
        if self._metadata.has_type(hit_type):
            return hit_type
        if len(types) == 1:
            return types[0]
        raise UnknownDocumentTypeError(
            f"Cannot tell the document type of hit {hit.get('_id')!r} "
            f"(_type={hit_type!r}, searched types={list(types)!r})"
        )

    def convert_to_document(self, hit: Mapping, types: Sequence[str] = ()) -> Any:
        metadata = self._metadata.get_metadata_by_type(self.resolve_type(hit, types))
        cls = metadata.document_class
        document = cls.__new__(cls)
        source = hit.get("_source") or {}
        for field in metadata.fields:
            setattr(document, field.attribute, source.get(field.name))
        document.id = hit.get("_id")
        document.score = hit.get("_score")
        return document

    def convert_to_array(self, hits: Sequence[Mapping]) -> list[dict]:
        return [dict(hit.get("_source") or {}) for hit in hits]

    def convert_to_source(self, document: Any) -> dict[str, Any]:
        metadata = self._metadata.get_metadata(type(document))
        source = {}
        for field in metadata.fields:
            value = getattr(document, field.attribute, None)
            if value is not None and value is not field.declaration:
                source[field.name] = value
        return source


class _ResultsIterator:
    def __init__(self, raw_data: Mapping, converter: Converter, types: Sequence[str] = ()):
        self._raw = raw_data
        self._converter = converter
        self._types = list(types)
        self._hits = list(raw_data.get("hits", {}).get("hits", []))
        self._converted: dict[int, Any] = {}

    def __len__(self) -> int:
        return len(self._hits)

    def __iter__(self) -> Iterator[Any]:
        for position in range(len(self._hits)):
            yield self[position]

    def __getitem__(self, position: int) -> Any:
        if position < 0:
            position += len(self._hits)
        if position not in self._converted:
            self._converted[position] = self._convert(self._hits[position])
        return self._converted[position]

    def count(self) -> int:
        """Number of hits in this page."""
        return len(self._hits)

    def get_total_count(self) -> int:
        """Number of documents matching the search, across all pages."""
        total = self._raw.get("hits", {}).get("total", 0)
        if isinstance(total, Mapping):
            return total.get("value", 0)
        return total

    def first(self) -> Optional[Any]:
        if not self._hits:
            return None
        return self[0]

    def get_aggregations(self) -> AggregationIterator:
        return AggregationIterator(self._raw.get("aggregations", {}))

    def get_suggestions(self) -> dict:
        return self._raw.get("suggest", {})

    def get_raw(self) -> Mapping:
        return self._raw

    def _convert(self, hit: Mapping) -> Any:
        raise NotImplementedError


class DocumentIterator(_ResultsIterator):
    """Hits converted into document objects."""

    def _convert(self, hit: Mapping) -> Any:
        return self._converter.convert_to_document(hit, self._types)


class RawIterator(_ResultsIterator):
    """Hits as returned by Elasticsearch."""

    def _convert(self, hit: Mapping) -> Any:
        return hit
