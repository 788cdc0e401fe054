"""Currency rate data models."""

from __future__ import annotations

from typing import Any

from lxml import etree
from pydantic import BaseModel, Field, field_validator


def _child_text(element: etree._Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    return child.text.strip()


class CurrencyRate(BaseModel):
    """One row of the daily currency rate list.

    Attributes:
        name: Human-readable currency name
        nominal: Number of currency units the value refers to
        value: Rate in roubles for ``nominal`` units
        numeric_code: ISO 4217 numeric code
        char_code: ISO 4217 alphabetic code
    """

    name: str = Field(default="", description="Currency name (Vname)")
    nominal: int = Field(default=1, gt=0, description="Units the value refers to (Vnom)")
    value: float = Field(..., ge=0, description="Rate for nominal units (Vcurs)")
    numeric_code: str | None = Field(default=None, description="Numeric code (Vcode)")
    char_code: str = Field(default="", description="Alphabetic code (VchCode)")

    @field_validator("value", mode="before")
    @classmethod
    def parse_decimal_comma(cls, v: Any) -> Any:
        """Accept both ``37.9064`` and ``37,9064``."""
        if isinstance(v, str):
            return v.strip().replace(",", ".")
        return v

    @field_validator("nominal", mode="before")
    @classmethod
    def parse_nominal(cls, v: Any) -> Any:
        """Nominal is sometimes sent as a decimal string like ``1.0``."""
        if isinstance(v, str) and v.strip():
            return int(float(v.strip().replace(",", ".")))
        return v

    @classmethod
    def from_element(cls, element: etree._Element) -> CurrencyRate:
        """Build a rate from a ``ValuteCursOnDate`` element."""
        fields = {
            "name": _child_text(element, "Vname"),
            "nominal": _child_text(element, "Vnom"),
            "value": _child_text(element, "Vcurs"),
            "numeric_code": _child_text(element, "Vcode"),
            "char_code": _child_text(element, "VchCode"),
        }
        return cls(**{key: value for key, value in fields.items() if value is not None})

    def unit_rate(self, precision: int = 4) -> float:
        """Rate of a single currency unit, rounded to ``precision`` places."""
        return round(self.value / self.nominal, precision)

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Доллар США",
                "nominal": 1,
                "value": 37.9064,
                "numeric_code": "840",
                "char_code": "USD",
            }
        }
    }
