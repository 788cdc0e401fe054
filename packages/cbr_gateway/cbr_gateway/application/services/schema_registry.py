"""Schema registry application service."""

from __future__ import annotations

from collections.abc import Mapping

from cbr_gateway.config import GatewayConfig
from cbr_gateway.config.config import SchemaEndpointsConfig
from cbr_gateway.domain.entities import SchemaDescriptor
from cbr_gateway.domain.enums import SchemaName
from cbr_gateway.domain.exceptions import UnknownSchemaError


class SchemaRegistry:
    """Static mapping from schema identifier to WSDL endpoint.

    The set of identifiers is fixed to :class:`SchemaName`; only the
    endpoints may be overridden.
    """

    def __init__(self, endpoints: Mapping[str, str] | None = None) -> None:
        """Initialize the registry.

        Args:
            endpoints: Endpoint overrides keyed by schema identifier; defaults
                come from :class:`~cbr_gateway.config.config.SchemaEndpointsConfig`

        Raises:
            UnknownSchemaError: If an override names a schema outside the fixed set
        """
        resolved = SchemaEndpointsConfig().model_dump()
        known = [name.value for name in SchemaName]
        for schema_id, endpoint in (endpoints or {}).items():
            if schema_id not in known:
                raise UnknownSchemaError(schema_id, known)
            resolved[schema_id] = endpoint

        self._descriptors: dict[str, SchemaDescriptor] = {
            schema_id: SchemaDescriptor(schema_id=schema_id, endpoint=resolved[schema_id])
            for schema_id in known
        }

    @classmethod
    def from_config(cls, config: GatewayConfig) -> SchemaRegistry:
        """Create a registry from gateway configuration."""
        return cls(config.endpoints())

    @staticmethod
    def normalize(schema_id: str | SchemaName) -> str:
        """Plain string form of a schema identifier."""
        return schema_id.value if isinstance(schema_id, SchemaName) else schema_id

    def __contains__(self, schema_id: object) -> bool:
        if isinstance(schema_id, SchemaName):
            schema_id = schema_id.value
        return schema_id in self._descriptors

    def schema_ids(self) -> list[str]:
        """Known schema identifiers in declaration order."""
        return list(self._descriptors)

    def descriptors(self) -> list[SchemaDescriptor]:
        """All schema descriptors in declaration order."""
        return list(self._descriptors.values())

    def get_descriptor(self, schema_id: str | SchemaName) -> SchemaDescriptor:
        """Get the descriptor of a schema.

        Raises:
            UnknownSchemaError: If the identifier is not registered
        """
        key = self.normalize(schema_id)
        try:
            return self._descriptors[key]
        except (KeyError, TypeError):
            raise UnknownSchemaError(str(key), self.schema_ids()) from None

    def resolve_endpoint(self, schema_id: str | SchemaName) -> str:
        """Resolve the WSDL endpoint a call to ``schema_id`` should target.

        Raises:
            UnknownSchemaError: If the identifier is not registered
        """
        return self.get_descriptor(schema_id).endpoint
