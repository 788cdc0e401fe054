"""Domain services for the CBR Gateway."""

from __future__ import annotations

from .contract_parser import is_struct_description, parse_type_description, parse_type_descriptions
from .date_coercion import coerce_date, resolve_date, to_calendar_date

__all__ = [
    "coerce_date",
    "is_struct_description",
    "parse_type_description",
    "parse_type_descriptions",
    "resolve_date",
    "to_calendar_date",
]
