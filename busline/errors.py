"""
Busline Exceptions.

Every failure of the resolution pass is a ConfigurationError. The
container and transport factory raise their own lookup errors at
instantiation time.
"""

from __future__ import annotations


class BuslineError(Exception):
    """Root exception for busline."""


class ConfigurationError(BuslineError):
    """
    Raised when a messaging configuration cannot be resolved.

    Always fatal: the resolution pass is aborted and no partial plan
    is returned. The message names the offending key or value.

    Attributes:
        key: Configuration key the error refers to (if known)
    """

    def __init__(self, message: str, *, key: str | None = None):
        self.key = key
        super().__init__(message)


class ServiceNotFoundError(BuslineError):
    """Raised when a container lookup names an unknown service id."""

    def __init__(self, service_id: str, available: list[str] | None = None):
        self.service_id = service_id
        known = ", ".join(available or []) or "(none)"
        super().__init__(f"Service not found: {service_id}. Available: {known}")


class UnsupportedTransportError(BuslineError):
    """Raised when no registered transport factory supports a DSN."""

    def __init__(self, dsn: str):
        self.dsn = dsn
        super().__init__(f"No transport supports the given DSN: {dsn}")
