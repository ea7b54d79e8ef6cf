"""
Configuration Resolver.

The single entry point turning a messaging configuration document into
a ResolvedPlan. It is a pure function of its inputs: no registry is
touched, nothing is instantiated, and the same inputs always yield the
same plan.

Stages (each may raise ConfigurationError, aborting the pass):
    1. Capability gate       -> which transport services survive
    2. Middleware assembly   -> default bus + ordered chain per bus
    3. Transport bindings    -> deferred factory construction
    4. Routing table         -> message type -> ordered senders

Usage:
    resolver = ConfigurationResolver(type_exists=importable_type_exists)
    plan = resolver.resolve(
        {"buses": {"command.bus": {}}, "transports": {"async": "memory://"}},
        Capabilities(serializer_enabled=True),
    )
    plan.default_bus            # "command.bus"
    plan.middleware_for("command.bus")
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from busline.config import Capabilities, MessengerConfig, get_capabilities
from busline.plan import BusPlan, ResolvedPlan

from .gate import gate
from .middleware import assemble_middleware, resolve_default_bus
from .oracle import importable_type_exists
from .routing import build_routing
from .transports import build_transports

logger = logging.getLogger(__name__)

TypeOracle = Callable[[str], bool]


class ConfigurationResolver:
    """
    Resolves messaging configuration into a wiring plan.

    The resolver holds only its collaborators (the type oracle and the
    fallback capabilities); it keeps no state between passes.

    Example:
        resolver = ConfigurationResolver(
            type_exists=StaticTypeOracle({"app.SendEmail"}),
            capabilities=Capabilities(serializer_enabled=True),
        )
        plan = resolver.resolve(config)
    """

    def __init__(
        self,
        *,
        type_exists: TypeOracle | None = None,
        capabilities: Capabilities | None = None,
    ):
        """
        Initialize resolver.

        Args:
            type_exists: Oracle for routing keys (importable classes if None)
            capabilities: Default capabilities (environment if None)
        """
        self._type_exists = type_exists or importable_type_exists
        self._capabilities = capabilities

    def resolve(
        self,
        config: MessengerConfig | dict[str, Any] | None,
        capabilities: Capabilities | None = None,
    ) -> ResolvedPlan:
        """
        Resolve a configuration into a plan.

        Args:
            config: MessengerConfig or raw document
            capabilities: Capability flags for this pass (overrides defaults)

        Returns:
            Immutable ResolvedPlan

        Raises:
            ConfigurationError: On any invalid or unsupported configuration
        """
        messenger = MessengerConfig.from_document(config)
        caps = capabilities or self._capabilities or get_capabilities()

        logger.info(
            f"[resolver] Resolving messenger config | "
            f"buses={len(messenger.buses)} | "
            f"transports={len(messenger.transports)} | "
            f"routes={len(messenger.routing)}"
        )

        # 1. Capability gate
        gated = gate(messenger, caps)

        # 2. Buses and middleware
        default_bus = resolve_default_bus(messenger.buses, messenger.default_bus)
        buses: dict[str, BusPlan] = {}
        for bus_id, bus in messenger.buses.items():
            buses[bus_id] = BusPlan(
                bus_id=bus_id,
                middleware=assemble_middleware(
                    bus_id,
                    bus,
                    validation_enabled=caps.validation_enabled,
                    debug_enabled=caps.tracing_enabled,
                ),
                is_default=bus_id == default_bus,
            )

        # 3. Transports
        transports = build_transports(
            messenger.transports,
            broker_factory_available=gated.broker_factory_available,
        )

        # 4. Routing
        routing = build_routing(messenger.routing, transports, self._type_exists)

        plan = ResolvedPlan(
            buses=buses,
            default_bus=default_bus,
            transports=transports,
            routing=routing,
            serializer=gated.serializer,
            serializer_alias=gated.serializer_alias,
            structured_serializer_available=gated.structured_serializer_available,
            broker_factory_available=gated.broker_factory_available,
        )

        logger.info(
            f"[resolver] Resolved plan | "
            f"default_bus={default_bus} | "
            f"transports={list(transports)} | "
            f"amqp={gated.broker_factory_available}"
        )

        return plan


def resolve_plan(
    config: MessengerConfig | dict[str, Any] | None,
    capabilities: Capabilities | None = None,
    *,
    type_exists: TypeOracle | None = None,
) -> ResolvedPlan:
    """
    Resolve a configuration in one call.

    Convenience wrapper around ConfigurationResolver for hosts that do
    not keep a resolver around.
    """
    return ConfigurationResolver(type_exists=type_exists).resolve(config, capabilities)


def create_resolver(
    *,
    type_names: list[str] | None = None,
    capabilities: Capabilities | None = None,
) -> ConfigurationResolver:
    """
    Create a ConfigurationResolver with common setup.

    Args:
        type_names: Fixed routable type names (importable classes if None)
        capabilities: Default capabilities (environment if None)

    Returns:
        Configured ConfigurationResolver
    """
    from .oracle import StaticTypeOracle

    oracle = StaticTypeOracle(type_names) if type_names is not None else None
    return ConfigurationResolver(type_exists=oracle, capabilities=capabilities)
