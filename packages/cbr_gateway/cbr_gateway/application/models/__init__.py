"""Shared data models for the CBR Gateway."""

from __future__ import annotations

from .rate_models import CurrencyRate

__all__ = ["CurrencyRate"]
