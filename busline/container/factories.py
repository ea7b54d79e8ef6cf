"""
Transport Factories.

Transports are never built by the resolver. Each transport binding is
constructed through the "busline.transport_factory" service, which
dispatches the DSN to the first registered factory that supports it.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, runtime_checkable

from busline.errors import UnsupportedTransportError

logger = logging.getLogger(__name__)


@runtime_checkable
class TransportFactory(Protocol):
    """
    Protocol for building transports from a DSN and options.

    Example:
        class RedisTransportFactory:
            def supports(self, dsn, options):
                return dsn.startswith("redis://")

            def create_transport(self, dsn, options):
                return RedisTransport(dsn, **options)
    """

    def supports(self, dsn: str, options: dict[str, Any]) -> bool:
        """Check if this factory handles the DSN."""
        ...

    def create_transport(self, dsn: str, options: dict[str, Any]) -> Any:
        """Build a transport (sender and receiver) for the DSN."""
        ...


class ChainTransportFactory:
    """
    Transport factory delegating to the first supporting factory.

    Factories are tried in registration order.
    """

    def __init__(self, factories: Iterable[TransportFactory] = ()):
        self._factories: list[TransportFactory] = list(factories)

    def add(self, factory: TransportFactory) -> None:
        self._factories.append(factory)

    def supports(self, dsn: str, options: dict[str, Any]) -> bool:
        return any(f.supports(dsn, options) for f in self._factories)

    def create_transport(self, dsn: str, options: dict[str, Any]) -> Any:
        """
        Build a transport.

        Raises:
            UnsupportedTransportError: If no factory supports the DSN
        """
        for factory in self._factories:
            if factory.supports(dsn, options):
                logger.debug(f"[factories] {type(factory).__name__} builds {dsn.split('://')[0]}")
                return factory.create_transport(dsn, options)
        raise UnsupportedTransportError(dsn)

    def __len__(self) -> int:
        return len(self._factories)
