"""
Well-known service ids, tags and middleware ids.

These names are shared between the resolver (which decides what is
available) and the container wiring (which registers it).
"""

# Serialization
DEFAULT_SERIALIZER_ID = "busline.transport.structured_serializer"
SERIALIZER_ALIAS = "busline.transport.serializer"

# Transports
TRANSPORT_FACTORY_ID = "busline.transport_factory"
AMQP_FACTORY_ID = "busline.transport.amqp.factory"
AMQP_DSN_PREFIX = "amqp://"
TRANSPORT_ID_PREFIX = "busline.transport."

# Routing
SENDERS_ID_PREFIX = "busline.senders."
SENDERS_LOCATOR_ID = "busline.senders_locator"
WILDCARD_MESSAGE = "*"

# Buses
DEFAULT_BUS_ALIAS = "message_bus"
BUS_INTERFACE_ALIAS = "MessageBus"

# Tags
BUS_TAG = "busline.bus"
RECEIVER_TAG = "busline.receiver"

# Middleware ids
LOGGING_MIDDLEWARE = "logging"
SEND_MESSAGE_MIDDLEWARE = "send_message"
HANDLE_MESSAGE_MIDDLEWARE = "handle_message"
TRACEABLE_MIDDLEWARE = "traceable"
VALIDATION_MIDDLEWARE_IDS = frozenset({"validation", "busline.middleware.validation"})
