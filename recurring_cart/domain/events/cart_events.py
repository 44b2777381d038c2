"""
Cart domain events.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from ..entities.base import DomainEvent


@dataclass
class CartTotalsCalculated(DomainEvent):
    """Event raised when a cart's initial payment total has been calculated."""
    cart_id: UUID = None
    total: Decimal = Decimal("0")
    contains_subscription: bool = False

    @property
    def event_type(self) -> str:
        return "cart.totals_calculated"

    def payload(self) -> Dict[str, Any]:
        return {
            'cart_id': str(self.cart_id),
            'total': str(self.total),
            'contains_subscription': self.contains_subscription
        }


@dataclass
class RecurringCartsBuilt(DomainEvent):
    """Event raised when the recurring cart snapshots of a cart were replaced."""
    cart_id: UUID = None
    schedule_keys: List[str] = field(default_factory=list)
    recurring_total: Decimal = Decimal("0")

    @property
    def event_type(self) -> str:
        return "cart.recurring_carts_built"

    def payload(self) -> Dict[str, Any]:
        return {
            'cart_id': str(self.cart_id),
            'schedule_keys': list(self.schedule_keys),
            'recurring_total': str(self.recurring_total)
        }
