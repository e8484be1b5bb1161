"""Connection and manager settings.

Values resolve in order (later wins):
  1. ``ConnectionConfig`` defaults
  2. ``ELASTICSEARCH_*`` environment variables
  3. Keyword overrides passed to :func:`load_config`
"""

import os
from dataclasses import dataclass
from typing import Callable, Optional


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


@dataclass
class ConnectionConfig:
    """Where the cluster is, how to reach it and which index the manager uses."""

    host: str = "localhost"
    port: int = 9200
    user: str = ""
    password: str = ""
    use_ssl: bool = False
    verify_certs: bool = True
    ca_certs: Optional[str] = None
    timeout: int = 30
    max_retries: int = 3
    retry_on_timeout: bool = True
    http_compress: bool = False
    index_name: str = "default"
    bulk_commit_size: int = 500

    @property
    def http_auth(self) -> Optional[tuple[str, str]]:
        if self.user and self.password:
            return (self.user, self.password)
        return None

    @property
    def hosts(self) -> list[dict]:
        scheme = "https" if self.use_ssl else "http"
        return [{"host": self.host, "port": self.port, "scheme": scheme}]


# env var -> (config field, parser); unset or empty variables are ignored
ENV_VARS: dict[str, tuple[str, Callable[[str], object]]] = {
    "ELASTICSEARCH_HOST": ("host", str),
    "ELASTICSEARCH_PORT": ("port", int),
    "ELASTICSEARCH_USER": ("user", str),
    "ELASTICSEARCH_PASSWORD": ("password", str),
    "ELASTICSEARCH_USE_SSL": ("use_ssl", _parse_bool),
    "ELASTICSEARCH_VERIFY_CERTS": ("verify_certs", _parse_bool),
    "ELASTICSEARCH_CA_CERTS": ("ca_certs", str),
    "ELASTICSEARCH_TIMEOUT": ("timeout", int),
    "ELASTICSEARCH_MAX_RETRIES": ("max_retries", int),
    "ELASTICSEARCH_RETRY_ON_TIMEOUT": ("retry_on_timeout", _parse_bool),
    "ELASTICSEARCH_HTTP_COMPRESS": ("http_compress", _parse_bool),
    "ELASTICSEARCH_INDEX": ("index_name", str),
    "ELASTICSEARCH_BULK_COMMIT_SIZE": ("bulk_commit_size", int),
}


def load_config(**overrides) -> ConnectionConfig:
    """Build a ConnectionConfig from the environment and *overrides*.

    Raises:
        ValueError: an environment variable does not parse.
        TypeError: an override names no config field.
    """
    cfg = ConnectionConfig()

    for env_var, (field, parse) in ENV_VARS.items():
        raw = os.getenv(env_var)
        if raw:
            setattr(cfg, field, parse(raw))

    for key, value in overrides.items():
        if not hasattr(cfg, key):
            raise TypeError(f"Unknown config key: {key!r}")
        setattr(cfg, key, value)

    return cfg
