"""SOAP remote client built on zeep."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from copy import deepcopy
from typing import Any

import requests
from lxml import etree
from zeep import Client, xsd
from zeep.exceptions import Error as ZeepError
from zeep.exceptions import Fault
from zeep.helpers import serialize_object
from zeep.transports import Transport

from cbr_gateway.config import GatewayConfig, get_config
from cbr_gateway.domain.entities import SchemaDescriptor
from cbr_gateway.domain.enums import ParameterType
from cbr_gateway.domain.exceptions import RemoteCallError, SchemaConnectionError
from cbr_gateway.domain.interfaces import RemoteClient, RemoteClientFactory
from cbr_gateway.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Field zeep fills with xs:any content
ANY_FIELD = "_value_1"


def _field_type_tag(child: Any) -> str:
    """Type tag of a complex type's child, as used in type descriptions."""
    if isinstance(child, xsd.Any):
        return ParameterType.ANY_XML.value
    child_type = getattr(child, "type", None)
    name = getattr(child_type, "name", None)
    if name:
        return str(name)
    if isinstance(child_type, xsd.ComplexType):
        return ParameterType.STRUCT.value
    return "anyType"


def render_type_description(element: Any) -> str:
    """Render a global schema element as a raw type description.

    Complex elements become ``struct <Name> { <type> <field>; ... }``; simple
    ones become ``<type> <Name>``.
    """
    element_type = element.type
    if isinstance(element_type, xsd.ComplexType):
        fields = [f" {_field_type_tag(child)} {name};" for name, child in element_type.elements]
        body = "\n".join(fields)
        return f"struct {element.name} {{\n{body}\n}}" if fields else f"struct {element.name} {{\n}}"
    type_name = getattr(element_type, "name", None) or "anyType"
    return f"{type_name} {element.name}"


def schema_elements(elements: Any) -> Iterator[xsd.Element]:
    """Global elements that describe a message shape.

    zeep always lists its builtin ``xs:schema`` element among a document's
    elements; it is not an ``xsd.Element`` and has no type.
    """
    for element in elements:
        if isinstance(element, xsd.Element) and getattr(element, "type", None) is not None:
            yield element


def _iter_elements(value: Any) -> Iterator[etree._Element]:
    if isinstance(value, etree._Element):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _iter_elements(item)
    elif isinstance(value, list | tuple):
        for item in value:
            yield from _iter_elements(item)


def _is_inline_schema(element: etree._Element) -> bool:
    return etree.QName(element).localname == "schema"


def _wrap(tag: str, children: list[etree._Element]) -> etree._Element:
    wrapper = etree.Element(tag)
    wrapper.extend(deepcopy(child) for child in children)
    return wrapper


def any_payload(value: Any, result_field: str) -> etree._Element | None:
    """Collapse zeep's ``xs:any`` content into one element.

    DataSet results carry an inline ``xs:schema`` followed by the data
    document. Depending on what zeep could resolve, the payload arrives as
    one element or a list of elements taken from the response tree, so the
    enclosing ``<result_field>`` node is looked up and its data children are
    returned instead.

    Args:
        value: Content of the ``xs:any`` field
        result_field: Local name of the result element, e.g. ``GetCursOnDateResult``

    Returns:
        The data document, or None if the value holds no XML element
    """
    elements = [element for element in _iter_elements(value) if not _is_inline_schema(element)]
    if not elements:
        return None

    for ancestor in elements[0].iterancestors():
        if etree.QName(ancestor).localname == result_field:
            children = [
                child
                for child in ancestor
                if isinstance(child.tag, str) and not _is_inline_schema(child)
            ]
            return children[0] if len(children) == 1 else _wrap(ancestor.tag, children)

    if len(elements) == 1:
        return elements[0]
    parent = elements[0].getparent()
    if parent is not None and all(element.getparent() is parent for element in elements):
        return parent
    return _wrap(result_field, elements)


def normalize_result(method_name: str, value: Any, suffix: str = "Result") -> dict[str, Any]:
    """Key a response by its ``<method>Result`` field.

    zeep unwraps single-part responses, returning the result field's value
    directly; this puts it back under the conventional field name.
    """
    key = f"{method_name}{suffix}"
    if isinstance(value, Mapping) and key in value:
        return dict(value)
    return {key: value}


class ZeepRemoteClient(RemoteClient):
    """Remote client for one WSDL schema.

    The WSDL document is fetched when the client is constructed, so opening
    a client is the observable handshake with the remote service.
    """

    def __init__(
        self,
        descriptor: SchemaDescriptor,
        wsdl_timeout: float = 30.0,
        operation_timeout: float = 30.0,
        result_suffix: str = "Result",
        client: Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            descriptor: Schema the client is bound to
            wsdl_timeout: Timeout for loading the WSDL document in seconds
            operation_timeout: Timeout for remote operations in seconds
            result_suffix: Suffix of the result field used to key responses
            client: Pre-built zeep client, mainly for tests

        Raises:
            SchemaConnectionError: If the WSDL document cannot be loaded
        """
        self._descriptor = descriptor
        self._result_suffix = result_suffix

        if client is None:
            transport = Transport(timeout=wsdl_timeout, operation_timeout=operation_timeout)
            try:
                client = Client(descriptor.endpoint, transport=transport)
            except (ZeepError, requests.RequestException, OSError) as e:
                raise SchemaConnectionError(
                    descriptor.endpoint, str(e), details={"schema_id": descriptor.schema_id}
                ) from e

        self._client = client
        logger.info(
            "WSDL schema loaded",
            extra={"schema_id": descriptor.schema_id, "endpoint": descriptor.endpoint},
        )

    @property
    def endpoint(self) -> str:
        """WSDL endpoint the client is bound to."""
        return self._descriptor.endpoint

    @property
    def descriptor(self) -> SchemaDescriptor:
        """Schema the client is bound to."""
        return self._descriptor

    def get_types(self) -> list[str]:
        """Render every global element of the WSDL types section."""
        return [
            render_type_description(element)
            for element in schema_elements(self._client.wsdl.types.elements)
        ]

    def call(self, method_name: str, arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Invoke a remote operation.

        Args:
            method_name: Operation name from the WSDL
            arguments: Named arguments of the operation

        Returns:
            Response as plain dicts, keyed by ``<method>Result``

        Raises:
            RemoteCallError: On SOAP faults and transport failures
        """
        try:
            operation = self._client.service[method_name]
        except AttributeError as e:
            raise RemoteCallError(
                str(e), fault_code="Client", method_name=method_name, endpoint=self.endpoint
            ) from e

        try:
            result = operation(**arguments)
        except Fault as e:
            raise RemoteCallError(
                e.message, fault_code=e.code, method_name=method_name, endpoint=self.endpoint
            ) from e
        except (ZeepError, requests.RequestException) as e:
            raise RemoteCallError(
                str(e) or type(e).__name__,
                fault_code=type(e).__name__,
                method_name=method_name,
                endpoint=self.endpoint,
            ) from e

        response = normalize_result(
            method_name, serialize_object(result, target_cls=dict), self._result_suffix
        )
        result_field = f"{method_name}{self._result_suffix}"
        value = response[result_field]
        if isinstance(value, Mapping) and ANY_FIELD in value:
            payload = any_payload(value[ANY_FIELD], result_field)
            if payload is not None:
                response[result_field] = {**value, ANY_FIELD: payload}
        return response


def make_zeep_client_factory(config: GatewayConfig | None = None) -> RemoteClientFactory:
    """Build a factory that opens zeep clients with the configured timeouts.

    Args:
        config: Gateway configuration; the global configuration if None

    Returns:
        Callable opening a ZeepRemoteClient for a schema descriptor
    """
    cfg = config or get_config()

    def factory(descriptor: SchemaDescriptor) -> RemoteClient:
        return ZeepRemoteClient(
            descriptor,
            wsdl_timeout=cfg.timeouts.wsdl_timeout,
            operation_timeout=cfg.timeouts.operation_timeout,
            result_suffix=cfg.results.result_suffix,
        )

    return factory
