"""Schema-driven SOAP gateway for the Central Bank of Russia web services."""

from __future__ import annotations

from .application import CBRGateway, SchemaGateway
from .application.models import CurrencyRate
from .config import GatewayConfig, get_config
from .domain.enums import SchemaName
from .domain.exceptions import (
    ArityMismatchError,
    CBRGatewayError,
    ContractParseError,
    DateParseError,
    EmptyResultError,
    MissingParameterError,
    NoMethodSelectedError,
    NoSchemaSelectedError,
    RemoteCallError,
    SchemaConnectionError,
    UnknownMethodError,
    UnknownSchemaError,
    XmlExtractionError,
)
from .version import __version__

__all__ = [
    "ArityMismatchError",
    "CBRGateway",
    "CBRGatewayError",
    "ContractParseError",
    "CurrencyRate",
    "DateParseError",
    "EmptyResultError",
    "GatewayConfig",
    "MissingParameterError",
    "NoMethodSelectedError",
    "NoSchemaSelectedError",
    "RemoteCallError",
    "SchemaConnectionError",
    "SchemaGateway",
    "SchemaName",
    "UnknownMethodError",
    "UnknownSchemaError",
    "XmlExtractionError",
    "__version__",
    "get_config",
]
