"""Unit tests for the type description parser."""

from __future__ import annotations

import pytest
from cbr_gateway.domain.entities import MethodContract
from cbr_gateway.domain.exceptions import ContractParseError
from cbr_gateway.domain.services import (
    is_struct_description,
    parse_type_description,
    parse_type_descriptions,
)


class TestParseTypeDescription:
    """Test parsing of single struct descriptions."""

    def test_fields_keep_declaration_order(self) -> None:
        """Test that fields are returned in declaration order."""
        contract = parse_type_description(
            "struct DirRepoAuctionParam {\n dateTime DateFrom;\n dateTime DateTo;\n}"
        )

        assert contract.method_name == "DirRepoAuctionParam"
        assert contract.parameters == (("DateFrom", "dateTime"), ("DateTo", "dateTime"))
        assert contract.parameter_names == ["DateFrom", "DateTo"]

    def test_single_line_description(self) -> None:
        """Test that whitespace layout does not matter."""
        contract = parse_type_description("struct SearchByName{string NamePart;int Limit;}")

        assert contract.as_dict() == {"NamePart": "string", "Limit": "int"}

    def test_empty_struct(self) -> None:
        """Test that a struct without fields has an empty contract."""
        contract = parse_type_description("struct MainInfoXML {\n}")

        assert len(contract) == 0
        assert contract.signature() == "MainInfoXML()"

    def test_special_type_tags(self) -> None:
        """Test nested struct and wildcard type tags."""
        contract = parse_type_description(
            "struct GetCursOnDateResponse {\n struct GetCursOnDateResult;\n <anyXML> any;\n}"
        )

        assert contract.get_type("GetCursOnDateResult") == "struct"
        assert contract.get_type("any") == "<anyXML>"
        assert contract.get_type("missing") is None

    @pytest.mark.parametrize(
        "description",
        [
            "struct Broken {\n dateTime On_date\n}",
            "struct Broken {\n dateTime;\n}",
            "struct Broken \n dateTime On_date;\n",
            "struct {\n dateTime On_date;\n}",
            "struct Broken {\n date Time On_date;\n}",
        ],
    )
    def test_malformed_struct(self, description: str) -> None:
        """Test that grammar violations raise ContractParseError."""
        with pytest.raises(ContractParseError) as exc_info:
            parse_type_description(description, schema_id="daily")

        assert exc_info.value.details["schema_id"] == "daily"


class TestParseTypeDescriptions:
    """Test parsing of a schema's full type metadata."""

    def test_non_struct_descriptions_are_skipped(self) -> None:
        """Test that simple type aliases carry no contract."""
        contracts = parse_type_descriptions(
            [
                "string guid",
                "struct GetCursOnDate {\n dateTime On_date;\n}",
                "ArrayOfString ArrayOfString",
            ]
        )

        assert list(contracts) == ["GetCursOnDate"]
        assert contracts["GetCursOnDate"] == MethodContract(
            "GetCursOnDate", (("On_date", "dateTime"),)
        )

    def test_malformed_struct_aborts_the_pass(self) -> None:
        """Test that one malformed struct fails the whole pass."""
        with pytest.raises(ContractParseError):
            parse_type_descriptions(
                [
                    "struct GetCursOnDate {\n dateTime On_date;\n}",
                    "struct Broken {\n dateTime\n}",
                ]
            )

    def test_blank_description_is_malformed(self) -> None:
        """Test that an empty description is rejected."""
        with pytest.raises(ContractParseError):
            parse_type_descriptions(["  "])

    def test_is_struct_description(self) -> None:
        """Test struct keyword detection."""
        assert is_struct_description("struct A {\n}")
        assert is_struct_description("  struct A {")
        assert not is_struct_description("structure A")
        assert not is_struct_description("string guid")


class TestMethodContract:
    """Test contract rendering helpers."""

    def test_signature(self) -> None:
        """Test that the signature lists typed parameters in order."""
        contract = MethodContract(
            "DirRepoAuctionParam", (("DateFrom", "dateTime"), ("DateTo", "dateTime"))
        )

        assert contract.signature() == "DirRepoAuctionParam(dateTime DateFrom, dateTime DateTo)"
        assert "DateFrom" in contract
        assert "dateTime" not in contract
