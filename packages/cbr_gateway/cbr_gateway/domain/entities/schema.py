"""SchemaDescriptor domain entity."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SchemaDescriptor:
    """A named remote service description reachable at one endpoint.

    Attributes:
        schema_id: Short identifier used by callers (e.g. "daily")
        endpoint: WSDL document locator
    """

    schema_id: str
    endpoint: str

    def __post_init__(self) -> None:
        if not self.schema_id or not self.schema_id.strip():
            raise ValueError("Schema identifier must not be empty")
        if not self.endpoint or not self.endpoint.strip():
            raise ValueError(f"Endpoint for schema '{self.schema_id}' must not be empty")
