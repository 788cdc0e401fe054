"""Domain enums for the CBR Gateway."""

from __future__ import annotations

from enum import Enum


class SchemaName(str, Enum):
    """Identifiers of the WSDL schemas published by the bank."""

    DAILY = "daily"
    REGIONS = "regions"
    ORGANIZATIONS = "organizations"
    MARKET = "market"


class ParameterType(str, Enum):
    """Type tags with special meaning in rendered type descriptions."""

    DATE_TIME = "dateTime"  # coerced before dispatch
    STRUCT = "struct"  # anonymous nested complex type
    ANY_XML = "<anyXML>"  # xs:any wildcard
