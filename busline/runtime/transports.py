"""
Transport Construction.

Turns named transport configs into bindings whose construction is
deferred to the transport factory service. A binding is tagged as a
receiver under its name, so a consumer can discover it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from busline.errors import ConfigurationError
from busline.plan import TransportBinding
from busline.services import (
    AMQP_DSN_PREFIX,
    RECEIVER_TAG,
    TRANSPORT_FACTORY_ID,
    TRANSPORT_ID_PREFIX,
)

if TYPE_CHECKING:
    from busline.config import TransportConfig

logger = logging.getLogger(__name__)


def transport_service_id(name: str) -> str:
    """Service id of a named transport."""
    return f"{TRANSPORT_ID_PREFIX}{name}"


def build_transports(
    transports: Mapping[str, TransportConfig],
    *,
    broker_factory_available: bool,
) -> dict[str, TransportBinding]:
    """
    Build transport bindings.

    Names are mapping keys and therefore unique; a document repeating a
    name keeps the last occurrence.

    Args:
        transports: transport name -> config, in configuration order
        broker_factory_available: AMQP factory survived the capability gate

    Returns:
        transport name -> TransportBinding

    Raises:
        ConfigurationError: If an amqp:// DSN is used without the AMQP factory
    """
    bindings: dict[str, TransportBinding] = {}

    for name, transport in transports.items():
        if transport.dsn.startswith(AMQP_DSN_PREFIX) and not broker_factory_available:
            raise ConfigurationError(
                f"Transport '{name}': the default AMQP transport is not available. "
                "Make sure a serializer is configured and structured serialization "
                "is enabled.",
                key=f"transports.{name}.dsn",
            )

        bindings[name] = TransportBinding(
            name=name,
            service_id=transport_service_id(name),
            dsn=transport.dsn,
            options=dict(transport.options),
            factory=TRANSPORT_FACTORY_ID,
            tags=((RECEIVER_TAG, {"alias": name}),),
        )
        logger.debug(f"[transports] {name} -> {transport.scheme or '?'}://...")

    return bindings
