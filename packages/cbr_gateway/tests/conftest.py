"""Shared fixtures for CBR Gateway tests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from cbr_gateway.application.gateway import CBRGateway
from cbr_gateway.config import GatewayConfig
from cbr_gateway.domain.entities import SchemaDescriptor
from cbr_gateway.domain.interfaces import RemoteClient

DAILY_TYPES = [
    "struct GetCursOnDate {\n dateTime On_date;\n}",
    "struct GetCursOnDateResponse {\n struct GetCursOnDateResult;\n}",
    "struct EnumValutes {\n boolean Seld;\n}",
    "struct MainInfoXML {\n}",
    "string guid",
]

MARKET_TYPES = [
    "struct DirRepoAuctionParam {\n dateTime DateFrom;\n dateTime DateTo;\n}",
    "struct Bauction {\n dateTime fromDate;\n dateTime ToDate;\n}",
]

COURSES_XML = """<?xml version="1.0" encoding="utf-8"?>
<diffgr:diffgram xmlns:msdata="urn:schemas-microsoft-com:xml-msdata"
                 xmlns:diffgr="urn:schemas-microsoft-com:xml-diffgram-v1">
  <ValuteData xmlns="">
    <ValuteCursOnDate diffgr:id="ValuteCursOnDate1" msdata:rowOrder="0">
      <Vname>Доллар США</Vname>
      <Vnom>1</Vnom>
      <Vcurs>37.9064</Vcurs>
      <Vcode>840</Vcode>
      <VchCode>USD</VchCode>
    </ValuteCursOnDate>
    <ValuteCursOnDate diffgr:id="ValuteCursOnDate2" msdata:rowOrder="1">
      <Vname>Евро</Vname>
      <Vnom>1</Vnom>
      <Vcurs>49.3648</Vcurs>
      <Vcode>978</Vcode>
      <VchCode>EUR</VchCode>
    </ValuteCursOnDate>
    <ValuteCursOnDate diffgr:id="ValuteCursOnDate3" msdata:rowOrder="2">
      <Vname>Японских иен</Vname>
      <Vnom>100</Vnom>
      <Vcurs>36.19</Vcurs>
      <Vcode>392</Vcode>
      <VchCode>JPY</VchCode>
    </ValuteCursOnDate>
  </ValuteData>
</diffgr:diffgram>"""


class FakeRemoteClient(RemoteClient):
    """In-memory remote client recording every call."""

    def __init__(
        self,
        descriptor: SchemaDescriptor,
        types: list[str],
        responses: Mapping[str, Any],
    ) -> None:
        self.descriptor = descriptor
        self.types = types
        self.responses = dict(responses)
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.get_types_calls = 0

    @property
    def endpoint(self) -> str:
        return self.descriptor.endpoint

    def get_types(self) -> list[str]:
        self.get_types_calls += 1
        return list(self.types)

    def call(self, method_name: str, arguments: Mapping[str, Any]) -> Mapping[str, Any]:
        self.calls.append((method_name, dict(arguments)))
        response = self.responses.get(method_name)
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return {f"{method_name}Result": None}
        return response


class FakeClientFactory:
    """Client factory handing out FakeRemoteClient instances."""

    def __init__(self) -> None:
        self.types: dict[str, list[str]] = {"daily": DAILY_TYPES, "market": MARKET_TYPES}
        self.responses: dict[str, dict[str, Any]] = {
            "daily": {"GetCursOnDate": {"GetCursOnDateResult": {"any": COURSES_XML}}},
        }
        self.opened: list[str] = []
        self.clients: dict[str, FakeRemoteClient] = {}

    def __call__(self, descriptor: SchemaDescriptor) -> FakeRemoteClient:
        self.opened.append(descriptor.schema_id)
        client = FakeRemoteClient(
            descriptor,
            self.types.get(descriptor.schema_id, []),
            self.responses.get(descriptor.schema_id, {}),
        )
        self.clients[descriptor.schema_id] = client
        return client


@pytest.fixture
def courses_xml() -> str:
    """Serialized GetCursOnDate payload."""
    return COURSES_XML


@pytest.fixture
def client_factory() -> FakeClientFactory:
    """Factory of in-memory remote clients."""
    return FakeClientFactory()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    """Gateway configuration with metrics disabled."""
    return GatewayConfig(enable_metrics=False)


@pytest.fixture
def gateway(client_factory: FakeClientFactory, gateway_config: GatewayConfig) -> CBRGateway:
    """Gateway wired to in-memory remote clients."""
    return CBRGateway(config=gateway_config, client_factory=client_factory)
