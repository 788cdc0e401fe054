"""Unit tests for the currency rate lookups."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest
from cbr_gateway.application.gateway import CBRGateway
from cbr_gateway.application.models import CurrencyRate
from cbr_gateway.config import GatewayConfig
from cbr_gateway.domain.exceptions import EmptyResultError, XmlExtractionError
from lxml import etree
from pydantic import ValidationError


class TestCurrencyRate:
    """Test the currency rate model."""

    def test_from_element(self) -> None:
        """Test building a rate from a ValuteCursOnDate row."""
        row = etree.fromstring(
            "<ValuteCursOnDate><Vname>Японских иен</Vname><Vnom>100</Vnom>"
            "<Vcurs>36,19</Vcurs><Vcode>392</Vcode><VchCode>JPY</VchCode></ValuteCursOnDate>"
        )

        rate = CurrencyRate.from_element(row)

        assert rate.name == "Японских иен"
        assert rate.nominal == 100
        assert rate.value == pytest.approx(36.19)
        assert rate.numeric_code == "392"
        assert rate.char_code == "JPY"
        assert rate.unit_rate() == pytest.approx(0.3619)

    def test_decimal_nominal(self) -> None:
        """Test that a nominal sent as a decimal string is accepted."""
        assert CurrencyRate(nominal="10.0", value=1).nominal == 10

    def test_validation(self) -> None:
        """Test that a missing value or zero nominal is rejected."""
        with pytest.raises(ValidationError):
            CurrencyRate.from_element(etree.fromstring("<ValuteCursOnDate/>"))

        with pytest.raises(ValidationError):
            CurrencyRate(nominal=0, value=1)


class TestListCourses:
    """Test listing the daily currency rates."""

    def test_list_courses(self, gateway: CBRGateway, client_factory: Any) -> None:
        """Test that every row of the day is returned."""
        rates = gateway.list_courses("01.09.2014")

        assert [rate.char_code for rate in rates] == ["USD", "EUR", "JPY"]
        assert rates[0].value == pytest.approx(37.9064)
        assert client_factory.clients["daily"].calls == [
            ("GetCursOnDate", {"On_date": "2014-09-01T00:00:00"})
        ]
        assert gateway.current_schema == "daily"

    def test_date_forms(self, gateway: CBRGateway, client_factory: Any) -> None:
        """Test timestamps and date objects as the lookup date."""
        gateway.list_courses(1409518800)
        gateway.list_courses(date(2014, 9, 2))

        assert [args for _, args in client_factory.clients["daily"].calls] == [
            {"On_date": "2014-09-01T00:00:00"},
            {"On_date": "2014-09-02T00:00:00"},
        ]

    def test_payload_rooted_at_data(self, gateway: CBRGateway, client_factory: Any) -> None:
        """Test payloads whose root is the data table itself."""
        client_factory.responses["daily"]["GetCursOnDate"] = {
            "GetCursOnDateResult": {
                "any": "<ValuteData><ValuteCursOnDate><Vnom>1</Vnom><Vcurs>10.5</Vcurs>"
                "<VchCode>XYZ</VchCode></ValuteCursOnDate></ValuteData>"
            }
        }

        rates = gateway.list_courses("01.09.2014")
        assert rates == [CurrencyRate(nominal=1, value=10.5, char_code="XYZ")]

    @pytest.mark.parametrize(
        "payload",
        ["<diffgram/>", "<diffgram><ValuteData/></diffgram>"],
    )
    def test_empty_result(
        self, gateway: CBRGateway, client_factory: Any, payload: str
    ) -> None:
        """Test that a response without rows raises EmptyResultError."""
        client_factory.responses["daily"]["GetCursOnDate"] = {
            "GetCursOnDateResult": {"any": payload}
        }

        with pytest.raises(EmptyResultError) as exc_info:
            gateway.list_courses("01.09.2014")
        assert exc_info.value.details["path"] == "ValuteData/ValuteCursOnDate"

    def test_invalid_row(self, gateway: CBRGateway, client_factory: Any) -> None:
        """Test that a row without a rate raises XmlExtractionError."""
        client_factory.responses["daily"]["GetCursOnDate"] = {
            "GetCursOnDateResult": {
                "any": "<ValuteData><ValuteCursOnDate><VchCode>USD</VchCode>"
                "</ValuteCursOnDate></ValuteData>"
            }
        }

        with pytest.raises(XmlExtractionError):
            gateway.list_courses("01.09.2014")


class TestLookupCourseRate:
    """Test single currency lookups."""

    def test_known_code(self, gateway: CBRGateway) -> None:
        """Test the rate of one unit of a quoted currency."""
        assert gateway.lookup_course_rate("USD", "01.09.2014") == 37.9064

    def test_code_is_case_insensitive(self, gateway: CBRGateway) -> None:
        """Test that codes are matched regardless of case."""
        assert gateway.lookup_course_rate(" eur ", "01.09.2014") == 49.3648

    def test_nominal_is_divided_out(self, gateway: CBRGateway) -> None:
        """Test that rates quoted per 100 units are reduced to one unit."""
        assert gateway.lookup_course_rate("JPY", "01.09.2014") == pytest.approx(0.3619)

    def test_unknown_code(self, gateway: CBRGateway) -> None:
        """Test that an unquoted currency yields None."""
        assert gateway.lookup_course_rate("XXX", "01.09.2014") is None

    def test_configured_precision(self, client_factory: Any) -> None:
        """Test that rounding follows the configured precision."""
        gateway = CBRGateway(
            config=GatewayConfig(enable_metrics=False, rates={"precision": 2}),
            client_factory=client_factory,
        )

        assert gateway.lookup_course_rate("USD", "01.09.2014") == 37.91
