"""
FastAPI Integration for Busline.

Installs a resolved and wired messenger on a FastAPI application and
exposes its buses as dependencies.

Usage:
    app = FastAPI(lifespan=messenger_lifespan(FileConfigLoader("messenger.yaml")))

    @app.post("/orders")
    async def place_order(bus=Depends(get_message_bus)):
        ...

    @app.post("/events")
    async def publish(bus=Depends(bus_dependency("event.bus"))):
        ...
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

from fastapi import Depends, FastAPI, Request

from busline.container import BusEndpoint, ServiceContainer, register_core_services, wire_plan
from busline.plan import ResolvedPlan
from busline.runtime import ConfigurationResolver
from busline.services import DEFAULT_BUS_ALIAS

if TYPE_CHECKING:
    from busline.config import Capabilities, MessengerConfig
    from busline.runtime import FileConfigLoader, MemoryConfigLoader

logger = logging.getLogger(__name__)

STATE_ATTRIBUTE = "busline"


@dataclass(frozen=True)
class MessengerState:
    """What install_messenger stores on app.state."""

    plan: ResolvedPlan
    container: ServiceContainer


def install_messenger(
    app: FastAPI,
    config: MessengerConfig | dict[str, Any] | None,
    *,
    capabilities: Capabilities | None = None,
    container: ServiceContainer | None = None,
    type_exists: Callable[[str], bool] | None = None,
    bus_factory: Callable[..., Any] = BusEndpoint,
) -> MessengerState:
    """
    Resolve a configuration and wire it onto an application.

    Args:
        app: FastAPI application
        config: MessengerConfig or raw document
        capabilities: Capability flags (environment if None)
        container: Prepared container (core services registered if None)
        type_exists: Routing key oracle (importable classes if None)
        bus_factory: Bus service factory, see wire_plan

    Returns:
        The installed MessengerState

    Raises:
        ConfigurationError: If the configuration cannot be resolved
    """
    plan = ConfigurationResolver(type_exists=type_exists).resolve(config, capabilities)

    if container is None:
        container = ServiceContainer()
        register_core_services(container)

    wire_plan(plan, container, bus_factory=bus_factory)

    state = MessengerState(plan=plan, container=container)
    setattr(app.state, STATE_ATTRIBUTE, state)
    logger.info(f"[app] Messenger installed | default_bus={plan.default_bus}")
    return state


def messenger_lifespan(
    loader: FileConfigLoader | MemoryConfigLoader,
    **install_kwargs: Any,
):
    """
    Build a FastAPI lifespan that installs the messenger on startup.

    Configuration errors abort startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("[app] Installing messenger...")
        try:
            install_messenger(app, loader.load(), **install_kwargs)
        except Exception as e:
            logger.error(f"[app] Failed to install messenger: {e}", exc_info=True)
            raise

        try:
            yield
        finally:
            if hasattr(app.state, STATE_ATTRIBUTE):
                delattr(app.state, STATE_ATTRIBUTE)

    return lifespan


def get_messenger(request: Request) -> MessengerState:
    """Get the installed messenger state."""
    state = getattr(request.app.state, STATE_ATTRIBUTE, None)
    if state is None:
        raise RuntimeError("Messenger is not installed; call install_messenger() at startup")
    return state


def get_container(state: MessengerState = Depends(get_messenger)) -> ServiceContainer:
    return state.container


def get_plan(state: MessengerState = Depends(get_messenger)) -> ResolvedPlan:
    return state.plan


def get_message_bus(state: MessengerState = Depends(get_messenger)) -> Any:
    """
    Get the default bus.

    Raises:
        RuntimeError: If the configuration has no default bus
    """
    if not state.container.has(DEFAULT_BUS_ALIAS):
        buses = ", ".join(state.plan.buses) or "(none)"
        raise RuntimeError(
            f"No default message bus configured. Set default_bus to one of: {buses}"
        )
    return state.container.get(DEFAULT_BUS_ALIAS)


def bus_dependency(bus_id: str) -> Callable[..., Any]:
    """
    Create a dependency returning a specific bus.

    Example:
        @app.post("/events")
        async def publish(bus=Depends(bus_dependency("event.bus"))): ...
    """

    def _get_bus(state: MessengerState = Depends(get_messenger)) -> Any:
        return state.container.get(bus_id)

    _get_bus.__name__ = f"get_bus_{bus_id.replace('.', '_')}"
    return _get_bus
