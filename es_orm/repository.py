"""Document repository: find, search, count, update and remove one document type."""

import logging
from typing import Any, Mapping, Optional, Union

from elasticsearch_dsl import Search

from .client import NOT_FOUND_ERRORS, not_found_body
from .metadata import ClassName
from .results import ResultKind

logger = logging.getLogger(__name__)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return " OR ".join(_query_value(item) for item in value)
    return str(value)


class Repository:
    """Facade over a :class:`~es_orm.manager.Manager` for one mapped class.

    Args:
        manager: Manager owning the client and the document metadata.
        class_name: The document class, its import path
            (``"shop.documents:Product"``) or its registered type name.

    Raises:
        TypeError: *class_name* is neither a string nor a class.
        InvalidDocumentClassError: *class_name* does not name a loadable class.
        MissingDocumentAnnotationError: the class is not a ``@document``.
    """

    def __init__(self, manager, class_name: ClassName):
        if not isinstance(class_name, (str, type)):
            raise TypeError("Class name must be a string or a class.")

        self._manager = manager
        self._document_class = manager.get_metadata_collector().resolve_class(class_name)
        self._type = self._resolve_type(self._document_class)
        logger.debug("Repository for %s bound to type %s", self.get_class_name(), self._type)

    def get_manager(self):
        return self._manager

    def get_type(self) -> str:
        return self._type

    def get_class_name(self) -> str:
        """Fully qualified name of the mapped class."""
        return f"{self._document_class.__module__}.{self._document_class.__qualname__}"

    def get_document_class(self) -> type:
        return self._document_class

    def find(self, document_id: str) -> Optional[Any]:
        """Return a single document by ID, or ``None`` if it is not found."""
        return self._manager.find(self._type, document_id)

    def find_by(
        self,
        criteria: Mapping[str, Any],
        order_by: Optional[Mapping[str, str]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ):
        """Find documents by a set of criteria.

        Args:
            criteria: Field to value, e.g. ``{"group": ["best", "worst"], "job": "medic"}``.
                A sequence matches any of its values.  Values go into
                ``query_string`` queries unescaped.
            order_by: Field to direction, e.g. ``{"name": "asc", "surname": "desc"}``.
            limit: Maximum number of documents.
            offset: Number of documents to skip.

        Returns:
            A :class:`~es_orm.results.DocumentIterator`.
        """
        search = self.create_search()

        if limit is not None:
            search = search.extra(size=limit)
        if offset is not None:
            search = search.extra(from_=offset)

        for field, value in criteria.items():
            search = search.query("query_string", query=_query_value(value), default_field=field)

        if order_by:
            # sort() replaces earlier sorts, so all fields go in one call
            search = search.sort(
                *({field: {"order": direction.lower()}} for field, direction in order_by.items())
            )

        return self.execute(search)

    def find_one_by(
        self,
        criteria: Mapping[str, Any],
        order_by: Optional[Mapping[str, str]] = None,
    ) -> Optional[Any]:
        """First document matching *criteria*, or ``None``."""
        return self.find_by(criteria, order_by, limit=1).first()

    def create_search(self) -> Search:
        return Search()

    def execute(self, search: Search, result_kind: Union[ResultKind, str] = ResultKind.OBJECT):
        """Execute *search* against this repository's type.

        Returns:
            :class:`~es_orm.results.DocumentIterator`, :class:`~es_orm.results.RawIterator`,
            a list of ``_source`` dicts or the raw response, depending on *result_kind*.
        """
        return self._manager.execute([self._type], search, result_kind)

    def count(
        self,
        search: Search,
        params: Optional[Mapping[str, Any]] = None,
        return_raw: bool = False,
    ) -> Union[int, Any]:
        """Count documents matching *search*.

        Only the query part of the search is sent; the count API rejects
        sorting, paging and aggregations.

        Args:
            search: Search to count.
            params: Extra client parameters; they override the defaults.
            return_raw: Return the client response instead of the number.
        """
        body = {key: value for key, value in search.to_dict().items() if key == "query"}
        request = {**self._manager.request_params(), "body": body, **(params or {})}

        results = self._manager.get_client().count(**request)
        if return_raw:
            return results
        return results["count"]

    def remove(self, document_id: str) -> Any:
        """Delete a document by ID and return the client response.

        A missing document is not an error: the 404 response body
        (``"result": "not_found"``) is returned like any other.
        """
        request = {**self._manager.request_params(), "id": document_id}
        return self._send("delete", request)

    def update(
        self,
        document_id: str,
        fields: Optional[Mapping[str, Any]] = None,
        script: Optional[Union[str, Mapping[str, Any]]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Partial document update.

        Args:
            document_id: Document to update.
            fields: Partial document merged into the stored one.
            script: Update script, e.g. ``{"source": "ctx._source.count++"}``.
            params: Extra client parameters; they override the defaults.

        Returns:
            The client response; the error body when the document is missing.
        """
        body = {key: value for key, value in (("doc", fields), ("script", script)) if value}
        request = {
            "id": document_id,
            **self._manager.request_params(),
            "body": body,
            **(params or {}),
        }
        return self._send("update", request)

    def _send(self, method: str, request: Mapping[str, Any]) -> Any:
        try:
            return getattr(self._manager.get_client(), method)(**request)
        except NOT_FOUND_ERRORS as error:
            logger.debug("%s of %s/%s: not found", method, self._type, request.get("id"))
            return not_found_body(error)

    def _resolve_type(self, document_class: type) -> str:
        return self._manager.get_metadata_collector().get_document_type(document_class)
