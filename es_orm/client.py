"""Client factory for Elasticsearch / OpenSearch connections."""

from typing import Any, Optional

from .settings import ConnectionConfig, load_config

try:
    from elasticsearch import Elasticsearch
    from elasticsearch import NotFoundError as ElasticsearchNotFoundError
except ModuleNotFoundError:  # pragma: no cover
    Elasticsearch = None  # type: ignore[assignment]
    ElasticsearchNotFoundError = None  # type: ignore[assignment]

try:
    from opensearchpy import OpenSearch
    from opensearchpy import NotFoundError as OpenSearchNotFoundError
except ModuleNotFoundError:  # pragma: no cover
    OpenSearch = None  # type: ignore[assignment]
    OpenSearchNotFoundError = None  # type: ignore[assignment]

# 404 errors of whichever client libraries are installed.
NOT_FOUND_ERRORS: tuple[type[Exception], ...] = tuple(
    error for error in (ElasticsearchNotFoundError, OpenSearchNotFoundError) if error is not None
)


def not_found_body(error: Exception) -> Any:
    """Response body carried by a client 404 error."""
    body = getattr(error, "body", None)
    if body is None:
        # opensearch-py keeps it in ``info``
        body = getattr(error, "info", None)
    return body


def _resolve_client_class() -> type[Any]:
    """Return the first available client class, Elasticsearch first."""
    if Elasticsearch is not None:
        return Elasticsearch
    if OpenSearch is not None:
        return OpenSearch
    raise ModuleNotFoundError(
        "Either 'elasticsearch' or 'opensearch-py' must be installed to create a client."
    )


def _elasticsearch_kwargs(config: ConnectionConfig) -> dict:
    kwargs: dict = {
        "hosts": config.hosts,
        "verify_certs": config.verify_certs,
        "request_timeout": config.timeout,
        "max_retries": config.max_retries,
        "retry_on_timeout": config.retry_on_timeout,
        "http_compress": config.http_compress,
    }
    if config.http_auth:
        kwargs["basic_auth"] = config.http_auth
    return kwargs


def _opensearch_kwargs(config: ConnectionConfig) -> dict:
    kwargs: dict = {
        "hosts": config.hosts,
        "use_ssl": config.use_ssl,
        "verify_certs": config.verify_certs,
        "timeout": config.timeout,
        "max_retries": config.max_retries,
        "retry_on_timeout": config.retry_on_timeout,
        "http_compress": config.http_compress,
    }
    if config.http_auth:
        kwargs["http_auth"] = config.http_auth
    return kwargs


def create_client(
    config: Optional[ConnectionConfig] = None,
    **overrides,
) -> Any:
    """Create and return a search client.

    Args:
        config: An explicit :class:`ConnectionConfig`.  When ``None``,
            one is built via :func:`load_config` (env vars + *overrides*).
        **overrides: Passed to :func:`load_config` when *config* is ``None``.

    Returns:
        A configured Elasticsearch (or OpenSearch) client instance.
    """
    if config is None:
        config = load_config(**overrides)

    client_cls = _resolve_client_class()
    if client_cls is Elasticsearch:
        kwargs = _elasticsearch_kwargs(config)
    else:
        kwargs = _opensearch_kwargs(config)

    if config.ca_certs:
        kwargs["ca_certs"] = config.ca_certs

    return client_cls(**kwargs)
