"""Application services for the CBR Gateway."""

from __future__ import annotations

from .connection_cache import ConnectionCache
from .contract_discovery import ContractDiscovery
from .result_adapters import extract_xml_fragment
from .schema_registry import SchemaRegistry

__all__ = [
    "ConnectionCache",
    "ContractDiscovery",
    "SchemaRegistry",
    "extract_xml_fragment",
]
