"""
Busline FastAPI integration.
"""

from .api import router as messenger_router
from .dependencies import (
    MessengerState,
    bus_dependency,
    get_container,
    get_message_bus,
    get_messenger,
    get_plan,
    install_messenger,
    messenger_lifespan,
)

__all__ = [
    "MessengerState",
    "bus_dependency",
    "get_container",
    "get_message_bus",
    "get_messenger",
    "get_plan",
    "install_messenger",
    "messenger_lifespan",
    "messenger_router",
]
