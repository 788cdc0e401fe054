"""Domain interfaces for the CBR Gateway.

This module contains abstract interfaces that define the contract
between the dispatcher and remote schema transports.
"""

from __future__ import annotations

from .remote_client import RemoteClient, RemoteClientFactory

__all__ = ["RemoteClient", "RemoteClientFactory"]
