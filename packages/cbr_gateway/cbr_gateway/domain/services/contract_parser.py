"""Parser for schema type descriptions.

Type metadata arrives as one string per declared type, following the grammar::

    struct <identifier> { (<type> <identifier>;)* }

Descriptions of simple (non-struct) types, e.g. ``string guid``, declare no
callable shape and are skipped. A description that starts with ``struct`` but
breaks the grammar aborts the whole pass with ContractParseError.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from ..entities.contract import MethodContract
from ..exceptions import ContractParseError

_STRUCT_RE = re.compile(r"^\s*struct\s+(?P<name>[^\s{}]+)\s*\{(?P<body>[^{}]*)\}\s*$", re.DOTALL)
_FIELD_RE = re.compile(r"^(?P<type>\S+)\s+(?P<name>[A-Za-z_][\w.\-]*)$")
_STRUCT_KEYWORD_RE = re.compile(r"^\s*struct\b")


def is_struct_description(description: str) -> bool:
    """Check whether a raw type description declares a struct."""
    return bool(_STRUCT_KEYWORD_RE.match(description))


def parse_type_description(description: str, schema_id: str | None = None) -> MethodContract:
    """Parse one ``struct`` description into a method contract.

    Args:
        description: Raw type description
        schema_id: Schema the description belongs to, for error context

    Returns:
        MethodContract with fields in declaration order

    Raises:
        ContractParseError: If the description does not follow the grammar
    """
    match = _STRUCT_RE.match(description)
    if match is None:
        raise ContractParseError(description, schema_id=schema_id)

    chunks = match.group("body").split(";")
    # Everything after the last ';' must be blank
    if chunks[-1].strip():
        raise ContractParseError(
            description, schema_id=schema_id, details={"unterminated_field": chunks[-1].strip()}
        )

    parameters: list[tuple[str, str]] = []
    for chunk in chunks[:-1]:
        field_match = _FIELD_RE.match(chunk.strip())
        if field_match is None:
            raise ContractParseError(
                description, schema_id=schema_id, details={"bad_field": chunk.strip()}
            )
        parameters.append((field_match.group("name"), field_match.group("type")))

    return MethodContract(method_name=match.group("name"), parameters=tuple(parameters))


def parse_type_descriptions(
    descriptions: Iterable[str], schema_id: str | None = None
) -> dict[str, MethodContract]:
    """Parse a schema's full type metadata.

    Args:
        descriptions: Raw type descriptions as returned by the remote client
        schema_id: Schema the descriptions belong to, for error context

    Returns:
        Mapping of method name to contract, in discovery order

    Raises:
        ContractParseError: On the first malformed struct description
    """
    contracts: dict[str, MethodContract] = {}
    for description in descriptions:
        if not is_struct_description(description):
            if not description.strip():
                raise ContractParseError(description, schema_id=schema_id)
            continue
        contract = parse_type_description(description, schema_id=schema_id)
        contracts[contract.method_name] = contract
    return contracts
