"""
Busline Configuration

Declarative messaging configuration and capability flags.
"""

from .schemas import (
    BusConfig,
    Capabilities,
    DefaultMiddlewareMode,
    MessengerConfig,
    MiddlewareEntry,
    RoutingConfig,
    SerializerConfig,
    TransportConfig,
)
from .settings import get_capabilities

__all__ = [
    "BusConfig",
    "Capabilities",
    "DefaultMiddlewareMode",
    "MessengerConfig",
    "MiddlewareEntry",
    "RoutingConfig",
    "SerializerConfig",
    "TransportConfig",
    "get_capabilities",
]
