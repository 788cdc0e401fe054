"""PendingInvocation domain entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..exceptions import ArityMismatchError
from .contract import MethodContract


@dataclass
class PendingInvocation:
    """Captured state of a deferred remote call.

    Positional values are kept apart from named arguments because they can
    only be bound to parameter names once the method contract is known.

    Attributes:
        method_name: Remote method to invoke
        positional: Values to bind to contract parameters in discovery order
        arguments: Named arguments supplied by the caller
    """

    method_name: str
    positional: tuple[Any, ...] = field(default_factory=tuple)
    arguments: dict[str, Any] = field(default_factory=dict)

    @property
    def argument_count(self) -> int:
        """Total number of supplied arguments."""
        return len(self.positional) + len(self.arguments)

    def bind(self, contract: MethodContract) -> dict[str, Any]:
        """Bind positional values to contract parameter names.

        Args:
            contract: Contract of the invoked method

        Returns:
            A new mapping of parameter name to value

        Raises:
            ArityMismatchError: If more positional values than parameters are
                given, or a parameter is given both positionally and by name
        """
        names = contract.parameter_names
        if len(self.positional) > len(names):
            raise ArityMismatchError(self.method_name, names, self.argument_count)

        bound: dict[str, Any] = dict(zip(names, self.positional, strict=False))
        for name, value in self.arguments.items():
            if name in bound:
                raise ArityMismatchError(
                    self.method_name,
                    names,
                    self.argument_count,
                    reason=f"Parameter '{name}' of {self.method_name} given both by position and by name",
                )
            bound[name] = value
        return bound
