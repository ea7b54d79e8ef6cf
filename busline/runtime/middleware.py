"""
Bus Middleware Assembly.

Resolves the default bus and builds the ordered middleware chain of
each bus. The chain order is the invocation order around dispatch:

    [traceable(bus_id)]        debug + profiling only
    [logging]                  default middleware only
    <explicit middleware>
    [send_message]             default middleware only
    [handle_message(True?)]    default middleware only; True = allow no handlers
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from busline.config import DefaultMiddlewareMode
from busline.errors import ConfigurationError
from busline.plan import MiddlewareSpec
from busline.services import (
    HANDLE_MESSAGE_MIDDLEWARE,
    LOGGING_MIDDLEWARE,
    SEND_MESSAGE_MIDDLEWARE,
    TRACEABLE_MIDDLEWARE,
    VALIDATION_MIDDLEWARE_IDS,
)

if TYPE_CHECKING:
    from busline.config import BusConfig

logger = logging.getLogger(__name__)


def resolve_default_bus(
    buses: Mapping[str, BusConfig],
    default_bus: str | None = None,
) -> str | None:
    """
    Determine the default bus.

    An explicit default always wins. Without one, a single configured
    bus becomes the default; zero or several buses yield None.
    """
    if default_bus is not None:
        return default_bus
    if len(buses) == 1:
        implicit = next(iter(buses))
        logger.debug(f"[middleware] Single bus '{implicit}' used as default")
        return implicit
    return None


def _default_before() -> list[MiddlewareSpec]:
    return [MiddlewareSpec(LOGGING_MIDDLEWARE)]


def _default_after(mode: DefaultMiddlewareMode) -> list[MiddlewareSpec]:
    handle_arguments = (True,) if mode is DefaultMiddlewareMode.ALLOW_NO_HANDLERS else ()
    return [
        MiddlewareSpec(SEND_MESSAGE_MIDDLEWARE),
        MiddlewareSpec(HANDLE_MESSAGE_MIDDLEWARE, handle_arguments),
    ]


def assemble_middleware(
    bus_id: str,
    bus: BusConfig,
    *,
    validation_enabled: bool,
    debug_enabled: bool,
) -> tuple[MiddlewareSpec, ...]:
    """
    Build the ordered middleware chain of one bus.

    Args:
        bus_id: Bus identifier (argument of the traceable middleware)
        bus: Bus configuration
        validation_enabled: Validation capability is present
        debug_enabled: Debug mode with profiling available

    Returns:
        Middleware specs in invocation order

    Raises:
        ConfigurationError: If validation middleware is requested without
            validation support
    """
    middleware = [MiddlewareSpec(entry.id, tuple(entry.arguments)) for entry in bus.middleware]

    if bus.uses_default_middleware:
        middleware = _default_before() + middleware + _default_after(bus.default_middleware)

    for item in middleware:
        if item.id in VALIDATION_MIDDLEWARE_IDS and not validation_enabled:
            raise ConfigurationError(
                f"Bus '{bus_id}': the '{item.id}' middleware is only available when "
                "validation is installed and enabled (validation middleware requires "
                "validator support).",
                key=f"buses.{bus_id}.middleware",
            )

    if debug_enabled:
        middleware = [MiddlewareSpec(TRACEABLE_MIDDLEWARE, (bus_id,))] + middleware

    logger.debug(f"[middleware] {bus_id}: {[m.id for m in middleware]}")
    return tuple(middleware)
