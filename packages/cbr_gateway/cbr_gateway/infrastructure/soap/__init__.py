"""SOAP transport for the CBR Gateway."""

from __future__ import annotations

from .zeep_client import ZeepRemoteClient, make_zeep_client_factory

__all__ = ["ZeepRemoteClient", "make_zeep_client_factory"]
