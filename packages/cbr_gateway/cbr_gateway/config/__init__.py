"""Configuration package for the CBR Gateway."""

from .config import GatewayConfig, get_config, reload_config

__all__ = ["GatewayConfig", "get_config", "reload_config"]
