"""
Resolved Wiring Plan.

The output of a resolution pass: an immutable description of which
buses, middleware chains, transports and routes the host must register.
The plan never holds live objects, only ids, arguments and tags, so the
host decides how (and whether) to instantiate anything.

Flow:
    MessengerConfig + Capabilities
        -> ConfigurationResolver.resolve()
        -> ResolvedPlan
        -> wire_plan(plan, container)   (or the host's own registration code)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .services import DEFAULT_SERIALIZER_ID


def _frozen(value: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only copy of a mapping."""
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class MiddlewareSpec:
    """One middleware of a bus chain, with its constructor arguments."""

    id: str
    arguments: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "arguments": list(self.arguments)}


@dataclass(frozen=True)
class BusPlan:
    """
    A bus and its resolved middleware chain.

    The middleware order is the invocation order around dispatch
    (first = outermost).
    """

    bus_id: str
    middleware: tuple[MiddlewareSpec, ...]
    is_default: bool = False

    @property
    def middleware_ids(self) -> list[str]:
        return [m.id for m in self.middleware]


@dataclass(frozen=True)
class SerializerBinding:
    """The structured serializer with its format and context arguments."""

    service_id: str = DEFAULT_SERIALIZER_ID
    format: str = "json"
    context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "context", _frozen(self.context))


@dataclass(frozen=True)
class TransportBinding:
    """
    A transport whose construction is deferred to a factory service.

    The factory is called as factory.create_transport(dsn, options).
    Tags are (tag_name, attributes) pairs used for receiver discovery.
    """

    name: str
    service_id: str
    dsn: str
    options: Mapping[str, Any]
    factory: str
    tags: tuple[tuple[str, Mapping[str, Any]], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", _frozen(self.options))
        object.__setattr__(
            self, "tags", tuple((name, _frozen(attributes)) for name, attributes in self.tags)
        )


@dataclass(frozen=True)
class SenderReference:
    """
    A sender of a route.

    Points at a transport binding when is_transport is true, otherwise
    at an opaque service id provided by the host.
    """

    name: str
    service_id: str
    is_transport: bool


@dataclass(frozen=True)
class RouteBinding:
    """Senders for one message type (or the '*' wildcard)."""

    message_type: str
    senders: tuple[SenderReference, ...]
    send_and_handle: bool
    service_id: str

    @property
    def sender_names(self) -> list[str]:
        return [s.name for s in self.senders]


@dataclass(frozen=True)
class ResolvedPlan:
    """
    Fully resolved messaging wiring.

    Attributes:
        buses: bus id -> BusPlan, in configuration order
        default_bus: id of the default bus, if any
        transports: transport name -> TransportBinding
        routing: message type -> RouteBinding
        serializer: structured serializer binding, None when unavailable
        serializer_alias: service id aliased as the transport serializer
        structured_serializer_available: whether the structured serializer
            service stays registered
        broker_factory_available: whether the AMQP transport factory
            stays registered
    """

    buses: Mapping[str, BusPlan] = field(default_factory=dict)
    default_bus: str | None = None
    transports: Mapping[str, TransportBinding] = field(default_factory=dict)
    routing: Mapping[str, RouteBinding] = field(default_factory=dict)
    serializer: SerializerBinding | None = None
    serializer_alias: str | None = None
    structured_serializer_available: bool = True
    broker_factory_available: bool = True

    def __post_init__(self) -> None:
        # Maps are read-only views over private copies
        for name in ("buses", "transports", "routing"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    @property
    def middleware(self) -> dict[str, list[MiddlewareSpec]]:
        """bus id -> ordered middleware list."""
        return {bus_id: list(bus.middleware) for bus_id, bus in self.buses.items()}

    @property
    def defaults(self) -> dict[str, bool]:
        """bus id -> is-default."""
        return {bus_id: bus.is_default for bus_id, bus in self.buses.items()}

    def middleware_for(self, bus_id: str) -> list[MiddlewareSpec]:
        """Get the ordered middleware of a bus."""
        if bus_id not in self.buses:
            raise KeyError(f"Unknown bus: {bus_id}")
        return list(self.buses[bus_id].middleware)

    def senders_for(self, message_type: str) -> list[SenderReference]:
        """Get senders routed for an exact message type key (no inheritance lookup)."""
        route = self.routing.get(message_type)
        return list(route.senders) if route else []

    def to_dict(self) -> dict[str, Any]:
        return {
            "buses": {
                bus_id: {
                    "middleware": [m.to_dict() for m in bus.middleware],
                    "is_default": bus.is_default,
                }
                for bus_id, bus in self.buses.items()
            },
            "default_bus": self.default_bus,
            "transports": {
                name: {"dsn": t.dsn, "options": dict(t.options), "service_id": t.service_id}
                for name, t in self.transports.items()
            },
            "routing": {
                message: {
                    "senders": [s.service_id for s in route.senders],
                    "send_and_handle": route.send_and_handle,
                }
                for message, route in self.routing.items()
            },
            "serializer": (
                {
                    "service_id": self.serializer.service_id,
                    "format": self.serializer.format,
                    "context": dict(self.serializer.context),
                }
                if self.serializer
                else None
            ),
            "serializer_alias": self.serializer_alias,
            "structured_serializer_available": self.structured_serializer_available,
            "broker_factory_available": self.broker_factory_available,
        }
