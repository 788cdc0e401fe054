"""Unit tests for method contract discovery."""

from __future__ import annotations

from typing import Any
from unittest.mock import Mock

import pytest
from cbr_gateway.application.services import ConnectionCache, ContractDiscovery, SchemaRegistry
from cbr_gateway.domain.exceptions import (
    ContractParseError,
    NoSchemaSelectedError,
    UnknownMethodError,
)


class TestContractDiscovery:
    """Test contract discovery and memoization."""

    @pytest.fixture
    def discovery(self, client_factory: Any) -> ContractDiscovery:
        """Create contract discovery over the fake client factory."""
        return ContractDiscovery(ConnectionCache(SchemaRegistry(), client_factory))

    def test_contracts_are_memoized(self, discovery: ContractDiscovery, client_factory: Any) -> None:
        """Test that type metadata is fetched once per schema."""
        first = discovery.get_contracts("daily")
        second = discovery.get_contracts("daily")

        assert first is second
        assert client_factory.clients["daily"].get_types_calls == 1
        assert discovery.is_discovered("daily")
        assert not discovery.is_discovered("market")

    def test_discovery_order_and_skipped_aliases(self, discovery: ContractDiscovery) -> None:
        """Test that contracts keep discovery order and aliases are skipped."""
        contracts = discovery.get_contracts("daily")

        assert list(contracts) == [
            "GetCursOnDate",
            "GetCursOnDateResponse",
            "EnumValutes",
            "MainInfoXML",
        ]
        assert "guid" not in contracts

    def test_memoized_contracts_are_read_only(self, discovery: ContractDiscovery) -> None:
        """Test that the shared snapshot cannot be mutated."""
        contracts = discovery.get_contracts("daily")

        with pytest.raises(TypeError):
            contracts["Injected"] = contracts["GetCursOnDate"]  # type: ignore[index]

    def test_get_contract(self, discovery: ContractDiscovery) -> None:
        """Test fetching a single contract."""
        contract = discovery.get_contract("market", "DirRepoAuctionParam")

        assert contract.parameter_names == ["DateFrom", "DateTo"]

    def test_unknown_method_names_endpoint(self, discovery: ContractDiscovery) -> None:
        """Test that an unknown method error carries the schema endpoint."""
        with pytest.raises(UnknownMethodError) as exc_info:
            discovery.get_contract("daily", "Foo")

        endpoint = "http://www.cbr.ru/DailyInfoWebServ/DailyInfo.asmx?WSDL"
        assert exc_info.value.message == f"Function name Foo unavailable in this schema ({endpoint})"

    def test_no_schema_selected(self, discovery: ContractDiscovery) -> None:
        """Test that discovery needs a schema."""
        with pytest.raises(NoSchemaSelectedError):
            discovery.get_contracts(None)

    def test_malformed_metadata_is_not_memoized(self, client_factory: Any) -> None:
        """Test that a failed pass leaves nothing cached."""
        client_factory.types["regions"] = [
            "struct BicToRegCode {\n string BicCode;\n}",
            "struct Broken {\n string\n}",
        ]
        metrics = Mock()
        discovery = ContractDiscovery(ConnectionCache(SchemaRegistry(), client_factory), metrics)

        with pytest.raises(ContractParseError):
            discovery.get_contracts("regions")
        assert not discovery.is_discovered("regions")
        metrics.record_discovery.assert_called_once_with("regions", success=False)

        with pytest.raises(ContractParseError):
            discovery.get_contracts("regions")
        assert client_factory.clients["regions"].get_types_calls == 2

    def test_clear(self, discovery: ContractDiscovery, client_factory: Any) -> None:
        """Test that clear forces a new discovery pass."""
        discovery.get_contracts("daily")
        discovery.clear()
        discovery.get_contracts("daily")

        assert client_factory.clients["daily"].get_types_calls == 2
