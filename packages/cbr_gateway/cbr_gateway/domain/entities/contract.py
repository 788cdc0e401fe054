"""MethodContract domain entity."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class MethodContract:
    """Ordered parameter contract of a remotely invocable method.

    Attributes:
        method_name: Name of the remote method (or struct) the contract describes
        parameters: ``(parameter name, declared type tag)`` pairs in discovery order
    """

    method_name: str
    parameters: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.parameters)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.parameters)

    def __contains__(self, parameter: object) -> bool:
        return any(name == parameter for name, _ in self.parameters)

    @property
    def parameter_names(self) -> list[str]:
        """Parameter names in discovery order."""
        return [name for name, _ in self.parameters]

    def get_type(self, parameter: str) -> str | None:
        """Get the declared type tag of a parameter, or None if absent."""
        for name, type_name in self.parameters:
            if name == parameter:
                return type_name
        return None

    def as_dict(self) -> dict[str, str]:
        """Return the contract as an insertion-ordered ``name -> type`` mapping."""
        return dict(self.parameters)

    def signature(self) -> str:
        """Render the contract as a human-readable call signature.

        Example:
            >>> MethodContract("GetCursOnDate", (("On_date", "dateTime"),)).signature()
            'GetCursOnDate(dateTime On_date)'
        """
        params = ", ".join(f"{type_name} {name}" for name, type_name in self.parameters)
        return f"{self.method_name}({params})"
