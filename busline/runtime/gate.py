"""
Capability Gate.

First stage of resolution: decides which built-in transport services
survive, given the declared transports, the serializer selection and
the capabilities of the host.

Rules:
    - No transports: the structured serializer and the AMQP factory are
      dropped. Nothing needs them.
    - Transports + default structured serializer + no serialization
      support: ConfigurationError.
    - Transports + a serializer id: the id is aliased as the transport
      serializer.
    - Transports + no serializer id: the AMQP factory is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from busline.errors import ConfigurationError
from busline.plan import SerializerBinding
from busline.services import DEFAULT_SERIALIZER_ID

if TYPE_CHECKING:
    from busline.config import Capabilities, MessengerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatedConfig:
    """
    A configuration together with the services the gate let through.

    Attributes:
        config: The (unchanged) messenger configuration
        serializer: Structured serializer binding, if it is the selected serializer
        serializer_alias: Service id to alias as the transport serializer
        structured_serializer_available: Structured serializer service is kept
        broker_factory_available: AMQP transport factory is kept
    """

    config: MessengerConfig
    serializer: SerializerBinding | None
    serializer_alias: str | None
    structured_serializer_available: bool
    broker_factory_available: bool


def gate(config: MessengerConfig, capabilities: Capabilities) -> GatedConfig:
    """
    Apply capability gating to a configuration.

    Args:
        config: Normalized messenger configuration
        capabilities: Host capability flags

    Returns:
        GatedConfig describing the surviving transport services

    Raises:
        ConfigurationError: If the default serializer is selected without
            structured-serialization support
    """
    if not config.transports:
        logger.debug("[gate] No transports declared, dropping serializer and AMQP factory")
        return GatedConfig(
            config=config,
            serializer=None,
            serializer_alias=None,
            structured_serializer_available=False,
            broker_factory_available=False,
        )

    serializer_id = config.serializer.id
    serializer: SerializerBinding | None = None

    if serializer_id == DEFAULT_SERIALIZER_ID:
        if not capabilities.serializer_enabled:
            raise ConfigurationError(
                "The default transport serializer cannot be enabled: default serializer "
                "requires structured-serialization support. Enable serialization or "
                "configure another serializer id.",
                key="serializer.id",
            )
        serializer = SerializerBinding(
            service_id=DEFAULT_SERIALIZER_ID,
            format=config.serializer.format,
            context=dict(config.serializer.context),
        )

    if serializer_id:
        logger.debug(f"[gate] Transport serializer: {serializer_id}")
        broker_factory_available = True
    else:
        logger.info("[gate] No serializer configured, AMQP transport support disabled")
        broker_factory_available = False

    return GatedConfig(
        config=config,
        serializer=serializer,
        serializer_alias=serializer_id or None,
        structured_serializer_available=True,
        broker_factory_available=broker_factory_available,
    )
