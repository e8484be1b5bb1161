"""Manager: one client, one index, the documents mapped into it."""

import logging
from typing import Any, Iterable, Optional, Sequence, Union

from . import index as index_ops
from .client import NOT_FOUND_ERRORS, create_client
from .errors import DocumentParserError
from .metadata import ClassName, MetadataCollector
from .repository import Repository
from .results import Converter, DocumentIterator, RawIterator, ResultKind, response_body
from .settings import ConnectionConfig, load_config

try:
    from elasticsearch import helpers
except ModuleNotFoundError:  # pragma: no cover
    from opensearchpy import helpers

logger = logging.getLogger(__name__)


class Manager:
    """Executes searches and index operations for a set of document classes.

    Args:
        client: Elasticsearch (or OpenSearch) client.
        index_name: Index every document type lives in.
        metadata_collector: Registry of document classes; a fresh one when omitted.
        bulk_commit_size: Queued :meth:`persist` actions that trigger a commit.
        index_settings: Settings used by :meth:`create_index`.
    """

    def __init__(
        self,
        client: Any,
        index_name: str,
        metadata_collector: Optional[MetadataCollector] = None,
        bulk_commit_size: int = 500,
        index_settings: Optional[dict[str, Any]] = None,
    ):
        self._client = client
        self._index_name = index_name
        self._metadata = metadata_collector or MetadataCollector()
        self._converter = Converter(self._metadata)
        self.bulk_commit_size = bulk_commit_size
        self.index_settings = dict(index_settings or {})
        self._bulk_queue: list[dict[str, Any]] = []
        self._repositories: dict[str, Repository] = {}

    @classmethod
    def from_config(
        cls,
        config: Optional[ConnectionConfig] = None,
        documents: Iterable[ClassName] = (),
        client: Any = None,
        **overrides,
    ) -> "Manager":
        """Build a manager (and, unless given, its client) from settings."""
        if config is None:
            config = load_config(**overrides)
        if client is None:
            client = create_client(config)
        return cls(
            client,
            config.index_name,
            MetadataCollector(documents),
            bulk_commit_size=config.bulk_commit_size,
        )

    # ── accessors ──────────────────────────────

    def get_client(self) -> Any:
        return self._client

    def get_index_name(self) -> str:
        return self._index_name

    def get_metadata_collector(self) -> MetadataCollector:
        return self._metadata

    def get_converter(self) -> Converter:
        return self._converter

    def get_repository(self, class_name: ClassName) -> Repository:
        """Repository for *class_name*; one instance per document type."""
        document_type = self._metadata.get_document_type(class_name)
        repository = self._repositories.get(document_type)
        if repository is None:
            repository = Repository(self, class_name)
            self._repositories[document_type] = repository
        return repository

    def request_params(self) -> dict[str, Any]:
        """Base client parameters addressing the managed index.

        Document types are not sent: mapping types were removed in
        Elasticsearch 7 and the 8.x client has no parameter for them.
        """
        return {"index": self._index_name}

    # ── reads ──────────────────────────────────

    def find(self, document_type: str, document_id: str) -> Optional[Any]:
        """Document by id, or ``None`` when it does not exist."""
        params = self.request_params()
        params["id"] = document_id
        try:
            response = response_body(self._client.get(**params))
        except NOT_FOUND_ERRORS:
            logger.debug("Document %s/%s not found in %s", document_type, document_id, self._index_name)
            return None

        if not response.get("found", True):
            return None
        return self._converter.convert_to_document(response, [document_type])

    def execute(
        self,
        types: Sequence[str],
        search: Any,
        result_kind: Union[ResultKind, str] = ResultKind.OBJECT,
    ):
        """Run *search* against *types* and render it as *result_kind*."""
        result_kind = ResultKind(result_kind)
        params = self.request_params()
        params["body"] = search.to_dict()
        logger.debug("Searching %s %s: %s", self._index_name, list(types), params["body"])

        raw = response_body(self._client.search(**params))

        if result_kind is ResultKind.RAW:
            return raw
        if result_kind is ResultKind.ARRAY:
            return self._converter.convert_to_array(raw.get("hits", {}).get("hits", []))
        if result_kind is ResultKind.RAW_ITERATOR:
            return RawIterator(raw, self._converter, types)
        return DocumentIterator(raw, self._converter, types)

    # ── index lifecycle ────────────────────────

    def get_mapping(self) -> dict[str, Any]:
        """Index mapping for every registered document type.

        All documents share one ``properties`` object, so two documents
        declaring the same field differently is an error.
        """
        mappings = self._metadata.get_mappings()

        merged: dict[str, Any] = {"properties": {}}
        for document_type, mapping in mappings.items():
            for key, value in mapping.items():
                if key != "properties":
                    merged.setdefault(key, value)
                    continue
                for field, fragment in value.items():
                    existing = merged["properties"].get(field)
                    if existing is not None and existing != fragment:
                        raise DocumentParserError(
                            f"Field {field!r} of type {document_type!r} conflicts with "
                            f"an existing mapping: {existing!r} != {fragment!r}"
                        )
                    merged["properties"][field] = fragment
        return merged

    def create_index(self, no_mapping: bool = False) -> dict:
        mappings = None if no_mapping else self.get_mapping()
        response = index_ops.create_index(
            self._client, self._index_name, mappings=mappings, settings=self.index_settings
        )
        logger.info("Created index: %s", self._index_name)
        return response

    def drop_index(self) -> dict:
        response = index_ops.delete_index(self._client, self._index_name)
        logger.info("Dropped index: %s", self._index_name)
        return response

    def index_exists(self) -> bool:
        return index_ops.index_exists(self._client, self._index_name)

    def refresh(self) -> dict:
        return index_ops.refresh_index(self._client, self._index_name)

    # ── bulk writes ────────────────────────────

    def persist(self, document: Any) -> None:
        """Queue *document* for indexing; commits once the queue is full."""
        action: dict[str, Any] = {
            "_op_type": "index",
            "_index": self._index_name,
            "_source": self._converter.convert_to_source(document),
        }
        document_id = getattr(document, "id", None)
        if document_id is not None:
            action["_id"] = document_id
        self._bulk_queue.append(action)

        if len(self._bulk_queue) >= self.bulk_commit_size:
            self.commit()

    def commit(self, refresh: bool = False) -> tuple[int, list]:
        """Send queued actions in one bulk request.

        Returns:
            A tuple of ``(success_count, error_list)``.
        """
        if not self._bulk_queue:
            return 0, []

        actions, self._bulk_queue = self._bulk_queue, []
        success, errors = helpers.bulk(
            self._client, actions, refresh=refresh, raise_on_error=False
        )
        if errors:
            logger.error("Bulk commit to %s had %d error(s): %s", self._index_name, len(errors), errors)
        logger.info("Committed %d/%d documents to %s", success, len(actions), self._index_name)
        return success, errors

    def pending(self) -> int:
        """Number of persisted documents not yet committed."""
        return len(self._bulk_queue)
