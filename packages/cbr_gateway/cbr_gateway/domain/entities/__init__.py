"""Domain entities for the CBR Gateway."""

from __future__ import annotations

from .contract import MethodContract
from .invocation import PendingInvocation
from .schema import SchemaDescriptor

__all__ = ["MethodContract", "PendingInvocation", "SchemaDescriptor"]
