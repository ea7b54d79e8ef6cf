"""
Busline Container Layer.

Wires a ResolvedPlan into a service container.
"""

from .factories import ChainTransportFactory, TransportFactory
from .locator import SendersLocator, message_type_names
from .registry import Alias, Definition, Parameter, Reference, ServiceContainer
from .wiring import BusEndpoint, register_core_services, wire_plan

__all__ = [
    "Alias",
    "BusEndpoint",
    "ChainTransportFactory",
    "Definition",
    "Parameter",
    "Reference",
    "SendersLocator",
    "ServiceContainer",
    "TransportFactory",
    "message_type_names",
    "register_core_services",
    "wire_plan",
]
