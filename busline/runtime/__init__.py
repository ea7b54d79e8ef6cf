"""
Busline Runtime Layer.

Resolution of a messaging configuration into a ResolvedPlan.

Design Principle:
    "Configuration flows in, a plan flows out."

    1. Loader reads the document (file or memory)
    2. Capability gate decides which transport services survive
    3. Each bus gets its ordered middleware chain
    4. Transports become deferred factory bindings
    5. Routing maps message types to ordered senders

Components:
    - ConfigurationResolver: runs the four stages
    - FileConfigLoader / MemoryConfigLoader: document sources
    - importable_type_exists / StaticTypeOracle: routing key oracles
"""

from .gate import GatedConfig, gate
from .loaders import FileConfigLoader, MemoryConfigLoader
from .middleware import assemble_middleware, resolve_default_bus
from .oracle import StaticTypeOracle, importable_type_exists
from .resolver import ConfigurationResolver, create_resolver, resolve_plan
from .routing import build_routing, resolve_sender, senders_service_id
from .transports import build_transports, transport_service_id

__all__ = [
    "ConfigurationResolver",
    "FileConfigLoader",
    "GatedConfig",
    "MemoryConfigLoader",
    "StaticTypeOracle",
    "assemble_middleware",
    "build_routing",
    "build_transports",
    "create_resolver",
    "gate",
    "importable_type_exists",
    "resolve_default_bus",
    "resolve_plan",
    "resolve_sender",
    "senders_service_id",
    "transport_service_id",
]
