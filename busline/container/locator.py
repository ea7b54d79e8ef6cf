"""
Senders Locator.

Consumes the routing table at dispatch time: given a message, returns
the senders it must be forwarded to and whether it is also handled
locally.

Lookup order for a message instance:
    1. Its own class, then base classes along the MRO (interfaces
       included), by qualified name "module.QualName"
    2. The "*" wildcard
Senders of every matching key are returned, first match first, without
repeating the same sender object.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from busline.services import WILDCARD_MESSAGE

logger = logging.getLogger(__name__)


def message_type_names(message: Any) -> list[str]:
    """Qualified names of the message class and its bases, most specific first."""
    cls = message if isinstance(message, type) else type(message)
    return [f"{c.__module__}.{c.__qualname__}" for c in cls.__mro__ if c is not object]


class SendersLocator:
    """
    Maps messages to their senders.

    Args:
        senders: message type -> sender list, or a zero-argument callable
            producing it (lazy container lookup)
        send_and_handle: message type -> also handle locally
    """

    def __init__(
        self,
        senders: Mapping[str, Iterable[Any] | Callable[[], Iterable[Any]]],
        send_and_handle: Mapping[str, bool] | None = None,
    ):
        self._senders = dict(senders)
        self._send_and_handle = dict(send_and_handle or {})

    def _keys_for(self, message: Any) -> list[str]:
        return [*message_type_names(message), WILDCARD_MESSAGE]

    def get_senders(self, message: Any) -> list[Any]:
        """Get the ordered senders for a message (empty if unrouted)."""
        found: list[Any] = []
        seen: set[int] = set()
        for key in self._keys_for(message):
            entry = self._senders.get(key)
            if entry is None:
                continue
            for sender in entry() if callable(entry) else entry:
                if id(sender) not in seen:
                    seen.add(id(sender))
                    found.append(sender)
        return found

    def should_handle(self, message: Any) -> bool:
        """
        Whether a routed message is also handled locally.

        Unrouted messages are always handled locally.
        """
        routed = False
        for key in self._keys_for(message):
            if key in self._senders:
                routed = True
                if self._send_and_handle.get(key, False):
                    return True
        return not routed

    @property
    def routed_types(self) -> list[str]:
        return list(self._senders.keys())
