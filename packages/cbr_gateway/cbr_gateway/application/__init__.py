"""Application layer for the CBR Gateway."""

from __future__ import annotations

from .gateway import CBRGateway, SchemaGateway

__all__ = ["CBRGateway", "SchemaGateway"]
