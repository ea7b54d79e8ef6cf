"""
Tests for the service container and plan wiring.
"""

import logging
from dataclasses import dataclass

import pytest

from busline.config import Capabilities
from busline.container import (
    BusEndpoint,
    Definition,
    Parameter,
    Reference,
    SendersLocator,
    ServiceContainer,
    register_core_services,
    wire_plan,
)
from busline.errors import ConfigurationError, ServiceNotFoundError
from busline.runtime import ConfigurationResolver, StaticTypeOracle
from busline.services import (
    AMQP_FACTORY_ID,
    DEFAULT_SERIALIZER_ID,
    SENDERS_LOCATOR_ID,
    SERIALIZER_ALIAS,
    TRANSPORT_FACTORY_ID,
)

# =============================================================================
# Test doubles
# =============================================================================


@dataclass
class FakeTransport:
    dsn: str
    options: dict


class MemoryTransportFactory:
    def supports(self, dsn, options):
        return dsn.startswith(("memory://", "amqp://"))

    def create_transport(self, dsn, options):
        return FakeTransport(dsn, options)


@dataclass
class FakeSerializer:
    format: str
    context: dict


@dataclass
class FakeAmqpFactory:
    serializer: object


class SendEmail:
    pass


SEND_EMAIL = f"{SendEmail.__module__}.{SendEmail.__qualname__}"


@pytest.fixture
def container():
    container = ServiceContainer()
    register_core_services(
        container,
        transport_factories=[MemoryTransportFactory()],
        serializer_factory=FakeSerializer,
        amqp_factory=FakeAmqpFactory,
    )
    return container


def _plan(document, capabilities=None):
    resolver = ConfigurationResolver(type_exists=StaticTypeOracle({SEND_EMAIL}))
    return resolver.resolve(document, capabilities or Capabilities(serializer_enabled=True))


# =============================================================================
# ServiceContainer Tests
# =============================================================================


class TestServiceContainer:
    def test_register_and_get(self):
        container = ServiceContainer()
        container.register("greeting", str, "hello")
        assert container.get("greeting") == "hello"

    def test_instances_are_shared(self):
        container = ServiceContainer()
        container.register("items", list)
        assert container.get("items") is container.get("items")

    def test_references_and_parameters(self):
        container = ServiceContainer()
        container.set_parameter("size", 3)
        container.register("base", list, [1, 2])
        container.register("pair", tuple, [Reference("base"), Parameter("size")])

        assert container.get("pair") == ([1, 2], 3)

    def test_nested_references_in_dicts(self):
        container = ServiceContainer()
        container.register("a", str, "A")
        container.register("mapping", dict, {"key": Reference("a")})
        assert container.get("mapping") == {"key": "A"}

    def test_factory_method(self):
        container = ServiceContainer()
        container.register("factory", MemoryTransportFactory)
        container.set_definition(
            "transport",
            Definition(factory=(Reference("factory"), "create_transport"), arguments=["memory://", {}]),
        )
        assert container.get("transport") == FakeTransport("memory://", {})

    def test_unknown_service(self):
        with pytest.raises(ServiceNotFoundError) as exc_info:
            ServiceContainer().get("missing")
        assert exc_info.value.service_id == "missing"

    def test_unknown_parameter(self):
        with pytest.raises(KeyError):
            ServiceContainer().get_parameter("missing")

    def test_aliases(self):
        container = ServiceContainer()
        container.register("real", str, "x")
        container.set_alias("alias", "real", public=True)
        container.set_alias("alias2", "alias")

        assert container.get("alias2") == "x"
        assert container.has("alias2") is True
        assert container.get_alias("alias").public is True

    def test_self_alias_rejected(self):
        with pytest.raises(ValueError):
            ServiceContainer().set_alias("a", "a")

    def test_circular_alias(self):
        container = ServiceContainer()
        container.set_alias("a", "b")
        container.set_alias("b", "a")
        with pytest.raises(ValueError):
            container.get("a")

    def test_alias_for_argument(self):
        container = ServiceContainer()
        container.register("event.bus", str, "bus")
        alias = container.register_alias_for_argument("event.bus", "MessageBus")

        assert alias.target == "event.bus"
        assert container.has_alias("MessageBus $eventBus")
        assert container.get("MessageBus $eventBus") == "bus"

    def test_replacing_alias_logs_warning(self, caplog):
        container = ServiceContainer()
        container.register("event.bus", str, "dotted")
        container.register("event_bus", str, "underscored")
        container.register_alias_for_argument("event.bus", "MessageBus")

        with caplog.at_level(logging.WARNING, logger="busline.container.registry"):
            container.register_alias_for_argument("event_bus", "MessageBus")

        assert "Replacing alias MessageBus $eventBus" in caplog.text
        assert container.get("MessageBus $eventBus") == "underscored"

    def test_same_alias_target_does_not_warn(self, caplog):
        container = ServiceContainer()
        with caplog.at_level(logging.WARNING, logger="busline.container.registry"):
            container.set_alias("a", "b")
            container.set_alias("a", "b", public=True)

        assert caplog.text == ""

    def test_remove_definition(self):
        container = ServiceContainer()
        container.register("x", str)

        assert container.remove_definition("x") is True
        assert container.remove_definition("x") is False
        assert container.has("x") is False

    def test_replace_argument_out_of_range(self):
        definition = Definition(factory=str)
        with pytest.raises(IndexError):
            definition.replace_argument(0, "x")

    def test_find_tagged(self):
        container = ServiceContainer()
        container.register("a", str).add_tag("receiver", alias="a")
        container.register("b", str)

        assert container.find_tagged("receiver") == {"a": [{"alias": "a"}]}

    def test_redefinition_drops_cached_instance(self):
        container = ServiceContainer()
        container.register("x", str, "one")
        container.get("x")
        container.register("x", str, "two")
        assert container.get("x") == "two"

    def test_clear(self):
        container = ServiceContainer()
        container.register("x", str)
        container.set_parameter("p", 1)
        container.clear()
        assert container.service_ids == []
        assert container.has_parameter("p") is False


# =============================================================================
# register_core_services / wire_plan Tests
# =============================================================================


class TestWirePlan:
    def test_core_services_registered(self, container):
        for service_id in (TRANSPORT_FACTORY_ID, DEFAULT_SERIALIZER_ID, AMQP_FACTORY_ID, SENDERS_LOCATOR_ID):
            assert container.has_definition(service_id)

    def test_no_transports_removes_serializer_and_amqp(self, container):
        wire_plan(_plan({"buses": {"b1": {}}}), container)

        assert not container.has_definition(DEFAULT_SERIALIZER_ID)
        assert not container.has_definition(AMQP_FACTORY_ID)
        assert not container.has_alias(SERIALIZER_ALIAS)

    def test_serializer_arguments_and_alias(self, container):
        plan = _plan(
            {
                "transports": {"t1": "amqp://host"},
                "serializer": {"format": "xml", "context": {"a": 1}},
            }
        )
        wire_plan(plan, container)

        assert container.get(SERIALIZER_ALIAS) == FakeSerializer("xml", {"a": 1})
        assert container.get(AMQP_FACTORY_ID).serializer is container.get(DEFAULT_SERIALIZER_ID)

    def test_custom_serializer_alias(self, container):
        container.register("app.serializer", str, "custom")
        plan = _plan({"transports": {"t1": "memory://"}, "serializer": "app.serializer"})
        wire_plan(plan, container)

        assert container.get_alias(SERIALIZER_ALIAS).target == "app.serializer"
        assert container.has_definition(AMQP_FACTORY_ID)

    def test_no_serializer_removes_amqp_factory(self, container):
        plan = _plan({"transports": {"t1": "memory://"}, "serializer": None})
        wire_plan(plan, container)

        assert not container.has_definition(AMQP_FACTORY_ID)
        assert container.has_definition(DEFAULT_SERIALIZER_ID)

    def test_buses(self, container):
        plan = _plan(
            {"buses": {"command.bus": {}, "event.bus": {"default_middleware": False}}, "default_bus": "command.bus"}
        )
        wire_plan(plan, container)

        assert container.get_parameter("command.bus.middleware") == [
            {"id": "logging", "arguments": []},
            {"id": "send_message", "arguments": []},
            {"id": "handle_message", "arguments": []},
        ]
        assert container.get_parameter("event.bus.middleware") == []

        bus = container.get("message_bus")
        assert bus == BusEndpoint("command.bus", container.get_parameter("command.bus.middleware"))
        assert container.get_alias("message_bus").public is True
        assert container.get("MessageBus") is bus
        assert container.get("MessageBus $eventBus").bus_id == "event.bus"
        assert set(container.find_tagged("busline.bus")) == {"command.bus", "event.bus"}

    @pytest.mark.parametrize("bus_id", ["message_bus", "MessageBus"])
    def test_bus_id_reserved_for_default_alias(self, container, bus_id):
        plan = _plan({"buses": {bus_id: {}, "event.bus": {}}, "default_bus": "event.bus"})

        with pytest.raises(ConfigurationError, match=bus_id) as exc_info:
            wire_plan(plan, container)
        assert exc_info.value.key == f"buses.{bus_id}"

    def test_reserved_bus_id_as_single_default(self, container):
        with pytest.raises(ConfigurationError, match="message_bus"):
            wire_plan(_plan({"buses": {"message_bus": {}}}), container)

    def test_reserved_bus_id_without_default_bus(self, container):
        wire_plan(_plan({"buses": {"message_bus": {}, "other": {}}}), container)

        assert container.get("message_bus").bus_id == "message_bus"

    def test_no_default_bus_no_alias(self, container):
        wire_plan(_plan({"buses": {"a": {}, "b": {}}}), container)
        assert not container.has("message_bus")

    def test_custom_bus_factory(self, container):
        calls = []

        def bus_factory(bus_id, middleware):
            calls.append((bus_id, [m["id"] for m in middleware]))
            return bus_id.upper()

        plan = _plan({"buses": {"b1": {"default_middleware": False, "middleware": ["x"]}}})
        wire_plan(plan, container, bus_factory=bus_factory)

        assert container.get("message_bus") == "B1"
        assert calls == [("b1", ["x"])]

    def test_transports(self, container):
        plan = _plan({"transports": {"async": {"dsn": "memory://q", "options": {"retry": 3}}}})
        wire_plan(plan, container)

        assert container.get("busline.transport.async") == FakeTransport("memory://q", {"retry": 3})
        assert container.find_tagged("busline.receiver") == {
            "busline.transport.async": [{"alias": "async"}]
        }

    def test_routing_and_locator(self, container):
        container.register("app.external_sender", str, "external")
        plan = _plan(
            {
                "transports": {"async": "memory://a"},
                "routing": {
                    SEND_EMAIL: ["async", "app.external_sender"],
                    "*": {"senders": ["async"], "send_and_handle": True},
                },
            }
        )
        wire_plan(plan, container)

        transport = container.get("busline.transport.async")
        assert container.get(f"busline.senders.{SEND_EMAIL}") == [transport, "external"]

        locator = container.get(SENDERS_LOCATOR_ID)
        assert isinstance(locator, SendersLocator)
        assert locator.get_senders(SendEmail()) == [transport, "external"]
        assert locator.should_handle(SendEmail()) is True
        assert locator.routed_types == [SEND_EMAIL, "*"]

    def test_locator_registered_when_missing(self):
        container = ServiceContainer()
        wire_plan(_plan({"buses": {"a": {}}}), container)

        locator = container.get(SENDERS_LOCATOR_ID)
        assert locator.routed_types == []

    def test_wire_plan_returns_container(self, container):
        assert wire_plan(_plan({}), container) is container
