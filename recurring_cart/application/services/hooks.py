"""
Named extension points around cart totalization.

An ordered pipeline, not a general pub/sub bus: callbacks of one point
run by ascending priority, then in registration order.
"""
from enum import Enum
from itertools import count
from typing import Any, Callable, Dict, List, Tuple


class HookPoint(str, Enum):
    """Extension points fired by cart totalization."""
    BEFORE_CALCULATE_TOTALS = "before_calculate_totals"  # action(cart, context)
    AFTER_CALCULATE_TOTALS = "after_calculate_totals"  # action(cart, context)
    BEFORE_GROUPING = "before_grouping"  # action(cart, context)
    AFTER_GROUPING = "after_grouping"  # action(cart, groups, context)
    PACKAGES_ASSEMBLED = "packages_assembled"  # filter(packages, cart, context)
    CALCULATED_TOTAL = "calculated_total"  # filter(total, cart, context)


class TotalsHooks:
    """Registry of callbacks per hook point."""

    DEFAULT_PRIORITY = 10

    def __init__(self) -> None:
        self._callbacks: Dict[HookPoint, List[Tuple[int, int, Callable[..., Any]]]] = {}
        self._sequence = count()

    def add(
        self,
        point: HookPoint,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        """Register a callback on a hook point."""
        entries = self._callbacks.setdefault(HookPoint(point), [])
        entries.append((priority, next(self._sequence), callback))
        entries.sort(key=lambda entry: (entry[0], entry[1]))

    def remove(self, point: HookPoint, callback: Callable[..., Any]) -> bool:
        """Unregister a callback. Returns True if it was registered."""
        entries = self._callbacks.get(HookPoint(point), [])
        for entry in entries:
            if entry[2] == callback:
                entries.remove(entry)
                return True
        return False

    def has(self, point: HookPoint) -> bool:
        return bool(self._callbacks.get(HookPoint(point)))

    def do_action(self, point: HookPoint, *args: Any) -> None:
        """Run every callback of ``point`` for its side effects."""
        for _, _, callback in list(self._callbacks.get(HookPoint(point), [])):
            callback(*args)

    def apply_filters(self, point: HookPoint, value: Any, *args: Any) -> Any:
        """Pass ``value`` through every callback of ``point`` and return the result."""
        for _, _, callback in list(self._callbacks.get(HookPoint(point), [])):
            value = callback(value, *args)
        return value
