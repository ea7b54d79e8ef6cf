"""
Type Existence Oracles.

Routing keys must name a real class or interface. The resolver asks an
injected oracle, a plain callable `type_exists(name) -> bool`, so tests
and hosts decide what "exists" means.

Implementations:
    - importable_type_exists: imports "pkg.module.Class" / "pkg.module:Class"
    - StaticTypeOracle: a fixed set of names
"""

from __future__ import annotations

import importlib
import inspect
import logging
from typing import Iterable

logger = logging.getLogger(__name__)


def _split_name(name: str) -> tuple[str, str] | None:
    if ":" in name:
        module_name, _, attr_path = name.partition(":")
    else:
        module_name, _, attr_path = name.rpartition(".")
    if not module_name or not attr_path:
        return None
    return module_name, attr_path


def importable_type_exists(name: str) -> bool:
    """
    Check whether a dotted name resolves to an importable class.

    Abstract base classes and Protocols count as interfaces. Nested
    classes are supported with the colon form ("pkg.mod:Outer.Inner").

    Args:
        name: "pkg.module.Class" or "pkg.module:Class"

    Returns:
        True if the name resolves to a class
    """
    parts = _split_name(name)
    if parts is None:
        return False
    module_name, attr_path = parts

    try:
        target = importlib.import_module(module_name)
    except Exception as e:
        # Any failure while importing means the type cannot be routed to
        logger.debug(f"[oracle] Module not importable: {module_name} ({type(e).__name__}: {e})")
        return False

    for attr in attr_path.split("."):
        target = getattr(target, attr, None)
        if target is None:
            return False

    return inspect.isclass(target)


class StaticTypeOracle:
    """
    Oracle backed by a fixed set of type names.

    Example:
        oracle = StaticTypeOracle.from_types(SendEmail, OrderPlaced)
        resolver = ConfigurationResolver(type_exists=oracle)
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names = frozenset(names)

    @classmethod
    def from_types(cls, *types: type) -> "StaticTypeOracle":
        """Build an oracle accepting the qualified names of the given classes."""
        return cls(f"{t.__module__}.{t.__qualname__}" for t in types)

    def __call__(self, name: str) -> bool:
        return name in self._names

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)
