"""Abstract interface for remote schema clients.

This module defines the contract the dispatcher relies on to talk to a
remote service: type metadata retrieval and invocation by method name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from cbr_gateway.domain.entities.schema import SchemaDescriptor


class RemoteClient(ABC):
    """Abstract base class for an opened handle bound to one schema.

    Implementations translate every transport or protocol fault into
    :class:`~cbr_gateway.domain.exceptions.RemoteCallError`.
    """

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """WSDL endpoint the client is bound to."""
        pass

    @abstractmethod
    def get_types(self) -> list[str]:
        """Retrieve the schema's type metadata.

        Returns:
            Raw type descriptions, one per declared type, in the form
            ``struct <Name> { <type> <field>; ... }``.
        """
        pass

    @abstractmethod
    def call(self, method_name: str, arguments: Mapping[str, Any]) -> Mapping[str, Any]:
        """Invoke a remote procedure by name.

        Args:
            method_name: Remote procedure name
            arguments: Validated and coerced named arguments

        Returns:
            Structured response keyed by result field name
        """
        pass


RemoteClientFactory = Callable[[SchemaDescriptor], RemoteClient]
