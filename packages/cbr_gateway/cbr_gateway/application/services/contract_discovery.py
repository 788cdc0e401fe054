"""Method contract discovery application service."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from types import MappingProxyType

from cbr_gateway.domain.entities import MethodContract
from cbr_gateway.domain.exceptions import ContractParseError, UnknownMethodError
from cbr_gateway.domain.services.contract_parser import parse_type_descriptions
from cbr_gateway.infrastructure.logging import get_logger
from cbr_gateway.infrastructure.monitoring import GatewayMetricsCollector

from .connection_cache import ConnectionCache

logger = get_logger(__name__)


class ContractDiscovery:
    """Discovers and memoizes the method contracts of each schema.

    Contracts are read from the schema client's type metadata once per
    schema; the memoized mapping is a read-only snapshot that can be shared
    between threads.
    """

    def __init__(
        self,
        connections: ConnectionCache,
        metrics: GatewayMetricsCollector | None = None,
    ) -> None:
        """Initialize contract discovery.

        Args:
            connections: Cache providing the schema clients
            metrics: Optional metrics collector
        """
        self._connections = connections
        self._metrics = metrics or GatewayMetricsCollector(enabled=False)
        self._contracts: dict[str, Mapping[str, MethodContract]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def _schema_lock(self, schema_id: str) -> threading.Lock:
        with self._lock:
            return self._locks.setdefault(schema_id, threading.Lock())

    def is_discovered(self, schema_id: str) -> bool:
        """Check whether contracts of a schema are already memoized."""
        return self._connections.registry.normalize(schema_id) in self._contracts

    def get_contracts(self, schema_id: str | None) -> Mapping[str, MethodContract]:
        """Get every method contract of a schema.

        Args:
            schema_id: Currently selected schema identifier

        Returns:
            Read-only mapping of method name to contract, in discovery order

        Raises:
            NoSchemaSelectedError: If no schema is selected
            ContractParseError: If any struct description is malformed; nothing
                is memoized in that case
        """
        client = self._connections.get_client(schema_id)
        key = self._connections.registry.normalize(schema_id)

        cached = self._contracts.get(key)
        if cached is not None:
            return cached

        with self._schema_lock(key):
            cached = self._contracts.get(key)
            if cached is not None:
                return cached

            try:
                contracts = parse_type_descriptions(client.get_types(), schema_id=key)
            except ContractParseError:
                self._metrics.record_discovery(key, success=False)
                logger.error(
                    "Contract discovery failed",
                    extra={"schema_id": key, "endpoint": client.endpoint},
                )
                raise

            snapshot = MappingProxyType(contracts)
            self._contracts[key] = snapshot
            self._metrics.record_discovery(key, success=True)
            logger.info(
                "Contracts discovered",
                extra={"schema_id": key, "method_count": len(snapshot)},
            )
            return snapshot

    def get_contract(self, schema_id: str | None, method_name: str) -> MethodContract:
        """Get the contract of one method.

        Raises:
            UnknownMethodError: If the schema has no such method; the message
                names the schema endpoint
        """
        contracts = self.get_contracts(schema_id)
        contract = contracts.get(method_name)
        if contract is None:
            key = self._connections.registry.normalize(schema_id)  # type: ignore[arg-type]
            raise UnknownMethodError(
                method_name,
                schema_id=key,
                endpoint=self._connections.registry.resolve_endpoint(key),
            )
        return contract

    def clear(self) -> None:
        """Forget every memoized contract."""
        with self._lock:
            self._contracts.clear()
