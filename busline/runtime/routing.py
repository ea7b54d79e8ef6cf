"""
Routing Table Construction.

Maps message types to the ordered senders that receive them. A sender
name resolves to a transport binding when one has that name, otherwise
it is kept as an opaque service reference supplied by the host.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Mapping

from busline.errors import ConfigurationError
from busline.plan import RouteBinding, SenderReference
from busline.services import SENDERS_ID_PREFIX, WILDCARD_MESSAGE

if TYPE_CHECKING:
    from busline.config import RoutingConfig
    from busline.plan import TransportBinding

logger = logging.getLogger(__name__)


def senders_service_id(message_type: str) -> str:
    """Service id of the sender list for a message type."""
    return f"{SENDERS_ID_PREFIX}{message_type}"


def resolve_sender(name: str, transports: Mapping[str, TransportBinding]) -> SenderReference:
    """Resolve a sender name against transports, falling back to a raw service id."""
    binding = transports.get(name)
    if binding is not None:
        return SenderReference(name=name, service_id=binding.service_id, is_transport=True)
    return SenderReference(name=name, service_id=name, is_transport=False)


def build_routing(
    routing: Mapping[str, RoutingConfig],
    transports: Mapping[str, TransportBinding],
    type_exists: Callable[[str], bool],
) -> dict[str, RouteBinding]:
    """
    Build the message routing table.

    Sender order is delivery fan-out order and duplicates are kept.

    Args:
        routing: message type -> routing config
        transports: transport name -> binding
        type_exists: Oracle telling whether a name is a real class/interface

    Returns:
        message type -> RouteBinding

    Raises:
        ConfigurationError: If a message type is neither '*' nor resolvable
    """
    table: dict[str, RouteBinding] = {}

    for message_type, rule in routing.items():
        if message_type != WILDCARD_MESSAGE and not type_exists(message_type):
            raise ConfigurationError(
                f'Invalid routing configuration: class or interface "{message_type}" not found.',
                key=f"routing.{message_type}",
            )

        senders = tuple(resolve_sender(name, transports) for name in rule.senders)

        table[message_type] = RouteBinding(
            message_type=message_type,
            senders=senders,
            send_and_handle=rule.send_and_handle,
            service_id=senders_service_id(message_type),
        )

        opaque = [s.name for s in senders if not s.is_transport]
        if opaque:
            logger.debug(f"[routing] {message_type}: non-transport senders {opaque}")

    return table
