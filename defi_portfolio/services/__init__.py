"""Service layer helpers"""

from .networks import NetworkConfig, NetworkRegistry

__all__ = [
    "NetworkConfig",
    "NetworkRegistry",
]
