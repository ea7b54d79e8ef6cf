"""
Capability settings from the environment.

The host usually knows its own capabilities and passes a Capabilities
instance explicitly. When it does not, they are read once from
BUSLINE_* environment variables.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from .schemas import Capabilities

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@lru_cache()
def get_capabilities() -> Capabilities:
    """
    Get capability flags from environment.

    Uses lru_cache for singleton pattern; call
    get_capabilities.cache_clear() after changing the environment.
    """
    capabilities = Capabilities(
        serializer_enabled=_env_flag("BUSLINE_SERIALIZER_ENABLED", False),
        validation_enabled=_env_flag("BUSLINE_VALIDATION_ENABLED", False),
        debug=_env_flag("BUSLINE_DEBUG", False),
        profiling_available=_env_flag("BUSLINE_PROFILING_AVAILABLE", True),
    )
    logger.debug(f"[settings] Capabilities from environment: {capabilities.model_dump()}")
    return capabilities
