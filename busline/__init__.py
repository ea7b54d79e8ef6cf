"""
Busline - declarative message bus configuration for Python services.

Busline turns a messaging configuration document (buses, middleware,
transports, routing) into a validated, immutable wiring plan, and wires
that plan into a service container or a FastAPI application.

- **Config Schemas**: pydantic models accepting the usual short forms
- **Capability Gating**: serializer/validation/debug aware resolution
- **Resolved Plan**: ordered middleware per bus, transport bindings, routing table
- **Container Wiring**: lazy services, aliases, tags, senders locator

Quick Start:
    >>> from busline import Capabilities, resolve_plan
    >>> plan = resolve_plan(
    ...     {"buses": {"command.bus": {}}},
    ...     Capabilities(),
    ... )
    >>> [m.id for m in plan.middleware_for("command.bus")]
    ['logging', 'send_message', 'handle_message']
"""

__version__ = "0.1.0"
__license__ = "MIT"

from busline.config import Capabilities, MessengerConfig
from busline.errors import BuslineError, ConfigurationError
from busline.plan import ResolvedPlan
from busline.runtime import ConfigurationResolver, FileConfigLoader, resolve_plan

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Resolution
    "Capabilities",
    "ConfigurationResolver",
    "FileConfigLoader",
    "MessengerConfig",
    "ResolvedPlan",
    "resolve_plan",
    # Errors
    "BuslineError",
    "ConfigurationError",
]
