"""Index management operations."""

from typing import Any, Optional


def index_exists(client: Any, name: str) -> bool:
    """Check whether an index exists."""
    return bool(client.indices.exists(index=name))


def create_index(
    client: Any,
    name: str,
    mappings: Optional[dict[str, Any]] = None,
    settings: Optional[dict[str, Any]] = None,
    shards: int = 1,
    replicas: int = 0,
) -> dict:
    """Create an index with optional mappings and settings.

    ``shards`` and ``replicas`` are applied as defaults and won't overwrite
    values already present in *settings*.
    """
    settings = dict(settings) if settings else {}
    settings.setdefault("number_of_shards", shards)
    settings.setdefault("number_of_replicas", replicas)

    body: dict[str, Any] = {"settings": settings}
    if mappings:
        body["mappings"] = mappings

    return client.indices.create(index=name, body=body)


def delete_index(client: Any, name: str) -> dict:
    """Delete an index."""
    return client.indices.delete(index=name)


def refresh_index(client: Any, name: str) -> dict:
    """Make recent writes visible to search."""
    return client.indices.refresh(index=name)


def get_index_mapping(client: Any, name: str) -> dict:
    """Return the mapping currently stored for an index."""
    return client.indices.get_mapping(index=name)
