"""
Plan Wiring.

Translates a ResolvedPlan into ServiceContainer registrations. This is
the only place where the plan meets a container; the resolver never
touches one.

Registrations:
    - core services: transport factory, structured serializer, AMQP
      factory, senders locator (register_core_services)
    - unavailable core services removed, serializer alias set
    - per bus: "<bus_id>.middleware" parameter, "<bus_id>" service tagged
      busline.bus, default bus aliased as "message_bus" and "MessageBus"
    - per transport: "busline.transport.<name>" built by the transport
      factory, tagged busline.receiver
    - per route: "busline.senders.<type>" sender list, fed to the
      senders locator
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable

from busline.errors import ConfigurationError
from busline.services import (
    AMQP_FACTORY_ID,
    BUS_INTERFACE_ALIAS,
    BUS_TAG,
    DEFAULT_BUS_ALIAS,
    DEFAULT_SERIALIZER_ID,
    SENDERS_LOCATOR_ID,
    SERIALIZER_ALIAS,
    TRANSPORT_FACTORY_ID,
)

from .factories import ChainTransportFactory
from .locator import SendersLocator
from .registry import Definition, Parameter, Reference

if TYPE_CHECKING:
    from busline.plan import ResolvedPlan

    from .factories import TransportFactory
    from .registry import ServiceContainer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BusEndpoint:
    """
    Default service registered for a bus.

    Carries the bus id and its middleware list ({id, arguments} dicts)
    for a dispatch engine to build the actual chain from. Hosts with a
    real bus class pass it as bus_factory to wire_plan.
    """

    bus_id: str
    middleware: list[dict[str, Any]] = field(default_factory=list)


def _sender_list(*senders: Any) -> list[Any]:
    return list(senders)


def register_core_services(
    container: ServiceContainer,
    *,
    transport_factories: Iterable[TransportFactory] = (),
    serializer_factory: Callable[..., Any] | None = None,
    amqp_factory: Callable[..., Any] | None = None,
) -> None:
    """
    Register the built-in messaging services a plan is wired against.

    Args:
        container: Target container
        transport_factories: Factories chained by the transport factory service
        serializer_factory: Builds the structured serializer as
            serializer_factory(format, context)
        amqp_factory: Builds the AMQP transport factory as
            amqp_factory(Reference(serializer alias))
    """
    container.register(TRANSPORT_FACTORY_ID, ChainTransportFactory, list(transport_factories))

    if serializer_factory is not None:
        container.register(DEFAULT_SERIALIZER_ID, serializer_factory, "json", {})

    if amqp_factory is not None:
        container.register(AMQP_FACTORY_ID, amqp_factory, Reference(SERIALIZER_ALIAS))

    container.register(SENDERS_LOCATOR_ID, SendersLocator, {}, {})


def wire_plan(
    plan: ResolvedPlan,
    container: ServiceContainer,
    *,
    bus_factory: Callable[..., Any] = BusEndpoint,
) -> ServiceContainer:
    """
    Register everything a plan describes.

    Args:
        plan: Resolved plan
        container: Target container (usually prepared by register_core_services)
        bus_factory: Called as bus_factory(bus_id, middleware) for each bus

    Returns:
        The same container

    Raises:
        ConfigurationError: If a bus id collides with the default bus aliases
    """
    _check_bus_ids(plan)
    _wire_serialization(plan, container)
    _wire_buses(plan, container, bus_factory)
    _wire_transports(plan, container)
    _wire_routing(plan, container)

    logger.info(
        f"[container] Wired plan | "
        f"buses={list(plan.buses)} | "
        f"transports={list(plan.transports)} | "
        f"routes={len(plan.routing)}"
    )
    return container


def _check_bus_ids(plan: ResolvedPlan) -> None:
    if plan.default_bus is None:
        return
    for bus_id in plan.buses:
        if bus_id in (DEFAULT_BUS_ALIAS, BUS_INTERFACE_ALIAS):
            raise ConfigurationError(
                f'Invalid bus id "{bus_id}": it is reserved for the default bus alias.',
                key=f"buses.{bus_id}",
            )


def _wire_serialization(plan: ResolvedPlan, container: ServiceContainer) -> None:
    if not plan.structured_serializer_available:
        container.remove_definition(DEFAULT_SERIALIZER_ID)
    if not plan.broker_factory_available:
        container.remove_definition(AMQP_FACTORY_ID)

    if plan.serializer is not None and container.has_definition(plan.serializer.service_id):
        container.get_definition(plan.serializer.service_id).replace_argument(
            0, plan.serializer.format
        ).replace_argument(1, dict(plan.serializer.context))

    if plan.serializer_alias:
        container.set_alias(SERIALIZER_ALIAS, plan.serializer_alias)


def _wire_buses(
    plan: ResolvedPlan,
    container: ServiceContainer,
    bus_factory: Callable[..., Any],
) -> None:
    for bus_id, bus in plan.buses.items():
        parameter = f"{bus_id}.middleware"
        container.set_parameter(parameter, [m.to_dict() for m in bus.middleware])

        definition = container.register(bus_id, bus_factory, bus_id, Parameter(parameter))
        definition.add_tag(BUS_TAG)

        if bus.is_default:
            container.set_alias(DEFAULT_BUS_ALIAS, bus_id, public=True)
            container.set_alias(BUS_INTERFACE_ALIAS, bus_id)
        else:
            container.register_alias_for_argument(bus_id, BUS_INTERFACE_ALIAS)


def _wire_transports(plan: ResolvedPlan, container: ServiceContainer) -> None:
    for binding in plan.transports.values():
        definition = Definition(
            factory=(Reference(binding.factory), "create_transport"),
            arguments=[binding.dsn, dict(binding.options)],
        )
        for tag, attributes in binding.tags:
            definition.add_tag(tag, **attributes)
        container.set_definition(binding.service_id, definition)


def _wire_routing(plan: ResolvedPlan, container: ServiceContainer) -> None:
    senders_mapping: dict[str, Reference] = {}
    send_and_handle: dict[str, bool] = {}

    for message_type, route in plan.routing.items():
        container.register(
            route.service_id,
            _sender_list,
            *[Reference(sender.service_id) for sender in route.senders],
        )
        senders_mapping[message_type] = Reference(route.service_id)
        send_and_handle[message_type] = route.send_and_handle

    if not container.has_definition(SENDERS_LOCATOR_ID):
        container.register(SENDERS_LOCATOR_ID, SendersLocator, {}, {})

    container.get_definition(SENDERS_LOCATOR_ID).replace_argument(
        0, senders_mapping
    ).replace_argument(1, send_and_handle)
