"""
Infrastructure module exports.

Configuration and bootstrap for the bridge components.
"""

from .config import InfraConfig, get_config, ClientBackendType
from .bootstrap import BridgeBootstrap

__all__ = [
    "InfraConfig",
    "get_config",
    "ClientBackendType",
    "BridgeBootstrap",
]
