"""
In-process session store.
"""
from copy import deepcopy
from typing import Any, Dict

from ...application.interfaces import SessionStore


class MemorySessionStore(SessionStore):
    """Session values held in a dict; values are copied in and out."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._values:
            return default
        return deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        self._values[key] = deepcopy(value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()
