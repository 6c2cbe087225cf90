# ---------------------------------------------------------------------------
# open_search_connect.py
# Shared utility for creating an OpenSearch connection.
# Import this module from the CLI, the API, or any script to avoid
# duplicating connection logic across the project.
# ---------------------------------------------------------------------------

from __future__ import annotations

import logging

from opensearchpy import OpenSearch
from opensearchpy import exceptions as os_exceptions

from conversational_search import errors
from conversational_search.config import Config

logger = logging.getLogger(__name__)

JSON_HEADERS = {"content-type": "application/json"}


class Connection:
    """
    Owns exactly one OpenSearch client for the configured endpoint.

    Create it once at start-up and release it with ``close()`` or by using
    the connection as a context manager. Calling ``close()`` twice is the
    caller's responsibility to avoid.

    The underlying urllib3 pool tolerates concurrent ``execute()`` calls
    from several threads; this class adds no locking of its own.
    """

    def __init__(self, client: OpenSearch, config: Config):
        self.client = client
        self.config = config

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def execute(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: str | bytes | None = None,
    ) -> str:
        """
        Send one request and return the raw response body.

        Raises:
            TransportError: On network failure, timeout, or non-2xx status.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        try:
            connection = self.client.transport.get_connection()
            status, _headers, raw = connection.perform_request(
                method, path, params=params, body=body, headers=JSON_HEADERS
            )
        except os_exceptions.TransportError as exc:
            status_code = exc.status_code if isinstance(exc.status_code, int) else None
            raise errors.TransportError(
                f"{method} {path} failed: {exc}", status_code=status_code
            ) from exc
        logger.debug("%s %s -> %s", method, path, status)
        return raw

    def close(self) -> None:
        logger.info("Closing OpenSearch client for %s:%s", self.config.host, self.config.port)
        self.client.close()


# ----------------------------
# OpenSearch client
# ----------------------------
def resolve_credentials(config: Config) -> tuple[str, str] | None:
    """
    Return (username, password) for basic auth, or None.

    Read from ``opensearch.username`` / ``opensearch.password``, which the
    OPENSEARCH_USERNAME / OPENSEARCH_PASSWORD environment variables
    override in the environment snapshot taken by the Config. Callers load
    ``.env`` before ``load_config()`` so secrets can stay out of the file.
    """
    username = (config.username or "").strip()
    password = config.password or ""
    if username and password:
        return username, password
    return None


def connect(
    config: Config,
    credentials: tuple[str, str] | None = None,
    *,
    verify: bool = False,
) -> Connection:
    """
    Create and return a Connection to the host/port/scheme in *config*.

    Credentials are sent with HTTP basic auth and are bound to this one
    host, never to other endpoints. Retries are disabled; every request is
    bounded by ``config.client_timeout`` seconds.

    Args:
        config: Loaded configuration.
        credentials: Optional (username, password).
        verify: Call ``info()`` once so an unreachable cluster fails here.

    Raises:
        ConnectionError: If the client cannot be created or, with
            ``verify``, the cluster is unreachable.
    """
    use_ssl = config.scheme == "https"
    if credentials:
        logger.info("Creating OpenSearch client with authentication for %s:%s", config.host, config.port)
    else:
        logger.info("Creating OpenSearch client for %s:%s", config.host, config.port)

    try:
        client = OpenSearch(
            hosts=[{"host": config.host, "port": config.port, "scheme": config.scheme}],
            http_auth=credentials,
            http_compress=True,   # gzip-compress request bodies
            use_ssl=use_ssl,
            verify_certs=config.verify_certs,
            ssl_show_warn=config.verify_certs,
            timeout=config.client_timeout,
            max_retries=0,
            retry_on_timeout=False,
        )
    except (os_exceptions.ImproperlyConfigured, ValueError) as exc:
        raise errors.ConnectionError(f"Cannot create client for {config.host}:{config.port}: {exc}") from exc

    if verify:
        # Verify the cluster is reachable; raises if not
        try:
            client.info()
        except os_exceptions.TransportError as exc:
            client.close()
            raise errors.ConnectionError(
                f"Cannot reach OpenSearch at {config.scheme}://{config.host}:{config.port}: {exc}"
            ) from exc

    return Connection(client, config)
