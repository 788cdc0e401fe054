"""Adapters rendering a raw remote result in other representations."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from lxml import etree

from cbr_gateway.domain.exceptions import XmlExtractionError

_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True)


def get_field(container: Any, name: str) -> Any:
    """Read a field from a mapping or an attribute-style object, None if absent."""
    if isinstance(container, Mapping):
        return container.get(name)
    return getattr(container, name, None)


def parse_xml_payload(payload: Any) -> etree._Element:
    """Turn an XML payload into an element.

    Args:
        payload: An lxml element, or serialized XML as str or bytes

    Raises:
        TypeError: If the payload is of another type
        etree.XMLSyntaxError: If the text is not well-formed XML
    """
    if isinstance(payload, etree._Element):
        return payload
    if isinstance(payload, str):
        # lxml rejects str input that still carries an encoding declaration
        return etree.fromstring(_XML_DECLARATION_RE.sub("", payload, count=1), _PARSER)
    if isinstance(payload, bytes):
        return etree.fromstring(payload, _PARSER)
    raise TypeError(f"unsupported XML payload type {type(payload).__name__}")


def extract_xml_fragment(
    raw_result: Any,
    method_name: str,
    result_suffix: str = "Result",
    payload_fields: Sequence[str] = ("any", "_value_1"),
) -> etree._Element:
    """Extract the XML document carried by a method's result field.

    Every result follows the shape ``<method>Result.<payload field>``, where
    the payload field holds serialized XML or an already parsed element.

    Args:
        raw_result: Structured response of the remote call
        method_name: Method that produced the result
        result_suffix: Suffix of the result field name
        payload_fields: Candidate payload field names, tried in order

    Returns:
        Root element of the payload

    Raises:
        XmlExtractionError: If a field is missing or the payload is not XML
    """
    result_field = f"{method_name}{result_suffix}"
    result = get_field(raw_result, result_field)
    if result is None:
        raise XmlExtractionError(method_name, result_field)

    for payload_field in payload_fields:
        payload = get_field(result, payload_field)
        if payload is None:
            continue
        try:
            return parse_xml_payload(payload)
        except (TypeError, etree.XMLSyntaxError) as e:
            raise XmlExtractionError(
                method_name, f"{result_field}.{payload_field}", reason=str(e)
            ) from e

    raise XmlExtractionError(
        method_name,
        f"{result_field}.{payload_fields[0] if payload_fields else ''}",
        reason=f"none of {', '.join(payload_fields)} present",
    )
