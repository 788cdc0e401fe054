"""Remote connection cache application service."""

from __future__ import annotations

import threading

from cbr_gateway.domain.exceptions import NoSchemaSelectedError
from cbr_gateway.domain.interfaces import RemoteClient, RemoteClientFactory
from cbr_gateway.infrastructure.logging import get_logger
from cbr_gateway.infrastructure.monitoring import GatewayMetricsCollector

from .schema_registry import SchemaRegistry

logger = get_logger(__name__)


class ConnectionCache:
    """Lazily opens and memoizes one remote client per schema.

    Clients are never shared across schemas. The cache is safe to share
    between gateway sessions running on different threads: concurrent first
    access to a schema opens exactly one client.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        client_factory: RemoteClientFactory,
        metrics: GatewayMetricsCollector | None = None,
    ) -> None:
        """Initialize the connection cache.

        Args:
            registry: Registry used to resolve schema endpoints
            client_factory: Opens a remote client for a schema descriptor
            metrics: Optional metrics collector
        """
        self._registry = registry
        self._client_factory = client_factory
        self._metrics = metrics or GatewayMetricsCollector(enabled=False)
        self._clients: dict[str, RemoteClient] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    @property
    def registry(self) -> SchemaRegistry:
        """Registry used to resolve schema endpoints."""
        return self._registry

    def __contains__(self, schema_id: object) -> bool:
        return schema_id in self._clients

    def _schema_lock(self, schema_id: str) -> threading.Lock:
        with self._lock:
            return self._locks.setdefault(schema_id, threading.Lock())

    def get_client(self, schema_id: str | None) -> RemoteClient:
        """Get the client of a schema, opening it on first access.

        Args:
            schema_id: Currently selected schema identifier

        Returns:
            The cached client for the schema

        Raises:
            NoSchemaSelectedError: If no schema is selected
            UnknownSchemaError: If the schema is not registered
            SchemaConnectionError: If the schema document cannot be loaded
        """
        if not schema_id:
            raise NoSchemaSelectedError()

        descriptor = self._registry.get_descriptor(schema_id)
        schema_id = descriptor.schema_id
        with self._schema_lock(schema_id):
            client = self._clients.get(schema_id)
            if client is not None:
                return client

            logger.info(
                "Opening remote client",
                extra={"schema_id": schema_id, "endpoint": descriptor.endpoint},
            )
            client = self._client_factory(descriptor)
            self._clients[schema_id] = client
            self._metrics.record_client_opened(schema_id)
            return client

    def clear(self) -> None:
        """Drop every cached client."""
        with self._lock:
            self._clients.clear()
