"""
Service Container.

A small dependency-injection container the resolved plan is wired into.
Services are described by Definitions (factory + arguments + tags) and
instantiated lazily on first get(); instances are shared.

Arguments may contain Reference (another service) and Parameter (a
container parameter) markers, resolved recursively inside lists and
dicts at instantiation time.

Example:
    container = ServiceContainer()
    container.set_parameter("bus.middleware", ["logging"])
    container.register("bus", MessageBus, Parameter("bus.middleware"))
    container.set_alias("message_bus", "bus", public=True)

    bus = container.get("message_bus")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from busline.errors import ServiceNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reference:
    """Reference to another service, resolved at instantiation time."""

    service_id: str


@dataclass(frozen=True)
class Parameter:
    """Reference to a container parameter, resolved at instantiation time."""

    name: str


@dataclass(frozen=True)
class Alias:
    """An alternative id for a service."""

    target: str
    public: bool = False


@dataclass
class Definition:
    """
    Describes how to build a service.

    Attributes:
        factory: Callable (often a class) producing the service, or a
            (Reference, method_name) pair calling a method of another service
        arguments: Positional arguments, may contain Reference/Parameter
        tags: tag name -> list of attribute dicts (a tag may repeat)
        public: Whether the service is meant to be fetched directly
    """

    factory: Callable[..., Any] | tuple[Reference, str]
    arguments: list[Any] = field(default_factory=list)
    tags: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    public: bool = False

    def add_argument(self, value: Any) -> "Definition":
        self.arguments.append(value)
        return self

    def replace_argument(self, index: int, value: Any) -> "Definition":
        """Replace an existing positional argument."""
        if index < 0 or index >= len(self.arguments):
            raise IndexError(
                f"Argument index {index} out of range (definition has "
                f"{len(self.arguments)} arguments)"
            )
        self.arguments[index] = value
        return self

    def add_tag(self, name: str, **attributes: Any) -> "Definition":
        self.tags.setdefault(name, []).append(attributes)
        return self

    def has_tag(self, name: str) -> bool:
        return name in self.tags


class ServiceContainer:
    """
    Registry of service definitions, aliases and parameters.

    Not thread-safe: it is populated once at startup and read afterwards.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, Definition] = {}
        self._aliases: dict[str, Alias] = {}
        self._parameters: dict[str, Any] = {}
        self._instances: dict[str, Any] = {}

    # ── Definitions ──────────────────────────────────────────────

    def set_definition(self, service_id: str, definition: Definition) -> Definition:
        """
        Register a definition under an id.

        Replaces any existing definition (and drops an alias of the same id).
        """
        if service_id in self._definitions:
            logger.warning(f"[container] Replacing existing definition: {service_id}")
        self._aliases.pop(service_id, None)
        self._instances.pop(service_id, None)
        self._definitions[service_id] = definition
        logger.debug(f"[container] Registered {service_id}")
        return definition

    def register(
        self,
        service_id: str,
        factory: Callable[..., Any] | tuple[Reference, str],
        *arguments: Any,
        public: bool = False,
    ) -> Definition:
        """Register a service built by calling factory(*arguments)."""
        return self.set_definition(
            service_id,
            Definition(factory=factory, arguments=list(arguments), public=public),
        )

    def has_definition(self, service_id: str) -> bool:
        return service_id in self._definitions

    def get_definition(self, service_id: str) -> Definition:
        """
        Get a definition by id (aliases are followed).

        Raises:
            ServiceNotFoundError: If no definition exists
        """
        resolved = self._resolve_alias(service_id)
        definition = self._definitions.get(resolved)
        if definition is None:
            raise ServiceNotFoundError(service_id, self.service_ids)
        return definition

    def remove_definition(self, service_id: str) -> bool:
        """
        Remove a definition.

        Returns:
            True if a definition was removed, False if none existed
        """
        if service_id in self._definitions:
            del self._definitions[service_id]
            self._instances.pop(service_id, None)
            logger.debug(f"[container] Removed {service_id}")
            return True
        return False

    @property
    def service_ids(self) -> list[str]:
        return list(self._definitions.keys())

    # ── Aliases ──────────────────────────────────────────────────

    def set_alias(self, alias: str, service_id: str, *, public: bool = False) -> Alias:
        if alias == service_id:
            raise ValueError(f"An alias cannot reference itself: {alias}")
        existing = self._aliases.get(alias)
        if existing is not None and existing.target != service_id:
            logger.warning(
                f"[container] Replacing alias {alias}: {existing.target} -> {service_id}"
            )
        entry = Alias(target=service_id, public=public)
        self._aliases[alias] = entry
        return entry

    def register_alias_for_argument(
        self,
        service_id: str,
        type_name: str,
        argument_name: str | None = None,
    ) -> Alias:
        """
        Alias a service for injection into arguments named after it.

        The alias id is "<type_name> $<argumentName>", the argument name
        defaulting to the camel-cased service id.
        """
        name = argument_name or _camelize(service_id)
        return self.set_alias(f"{type_name} ${name}", service_id)

    def has_alias(self, alias: str) -> bool:
        return alias in self._aliases

    def get_alias(self, alias: str) -> Alias:
        try:
            return self._aliases[alias]
        except KeyError:
            raise ServiceNotFoundError(alias, list(self._aliases)) from None

    # ── Parameters ───────────────────────────────────────────────

    def set_parameter(self, name: str, value: Any) -> None:
        self._parameters[name] = value

    def get_parameter(self, name: str) -> Any:
        try:
            return self._parameters[name]
        except KeyError:
            raise KeyError(f"Unknown container parameter: {name}") from None

    def has_parameter(self, name: str) -> bool:
        return name in self._parameters

    # ── Tags ─────────────────────────────────────────────────────

    def find_tagged(self, tag: str) -> dict[str, list[dict[str, Any]]]:
        """Get service id -> tag attributes for every definition with the tag."""
        return {
            service_id: list(definition.tags[tag])
            for service_id, definition in self._definitions.items()
            if definition.has_tag(tag)
        }

    # ── Instantiation ────────────────────────────────────────────

    def has(self, service_id: str) -> bool:
        """Check whether an id (or alias) resolves to a definition."""
        return self._resolve_alias(service_id) in self._definitions

    def get(self, service_id: str) -> Any:
        """
        Get (and lazily build) a service instance.

        Raises:
            ServiceNotFoundError: If the id resolves to no definition
        """
        resolved = self._resolve_alias(service_id)
        if resolved in self._instances:
            return self._instances[resolved]

        definition = self.get_definition(resolved)
        arguments = [self._resolve_value(arg) for arg in definition.arguments]

        factory = definition.factory
        if isinstance(factory, tuple):
            ref, method = factory
            factory = getattr(self._resolve_value(ref), method)

        instance = factory(*arguments)
        self._instances[resolved] = instance
        logger.debug(f"[container] Instantiated {resolved}")
        return instance

    def _resolve_alias(self, service_id: str) -> str:
        seen: set[str] = set()
        while service_id in self._aliases:
            if service_id in seen:
                raise ValueError(f"Circular alias detected for: {service_id}")
            seen.add(service_id)
            service_id = self._aliases[service_id].target
        return service_id

    def _resolve_value(self, value: Any) -> Any:
        if isinstance(value, Reference):
            return self.get(value.service_id)
        if isinstance(value, Parameter):
            return self.get_parameter(value.name)
        if isinstance(value, list):
            return [self._resolve_value(v) for v in value]
        if isinstance(value, tuple):
            return tuple(self._resolve_value(v) for v in value)
        if isinstance(value, dict):
            return {k: self._resolve_value(v) for k, v in value.items()}
        return value

    def clear(self) -> None:
        """Remove everything (for testing)."""
        self._definitions.clear()
        self._aliases.clear()
        self._parameters.clear()
        self._instances.clear()


def _camelize(service_id: str) -> str:
    parts = [p for p in service_id.replace("-", ".").replace("_", ".").split(".") if p]
    if not parts:
        return service_id
    return parts[0].lower() + "".join(p[:1].upper() + p[1:] for p in parts[1:])
