"""Monitoring infrastructure for the CBR Gateway."""

from __future__ import annotations

from .metrics import GatewayMetricsCollector

__all__ = ["GatewayMetricsCollector"]
