"""
Recurring cart snapshot.

One snapshot per billing schedule group, rebuilt from scratch on every
totalization.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .cart import Cart


def _iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment else None


@dataclass(frozen=True)
class RecurringCartSnapshot:
    """
    What will be charged on each renewal of one billing schedule.

    ``next_payment_date`` of None means the initial payment was the only
    payment (e.g. a one-period subscription).
    """
    key: str
    start_date: datetime
    trial_end_date: Optional[datetime] = None
    next_payment_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    cart: Cart = field(default_factory=Cart, compare=False)

    @property
    def total(self) -> Decimal:
        return self.cart.total

    @property
    def item_keys(self) -> List[str]:
        return list(self.cart.items.keys())

    @property
    def has_further_payments(self) -> bool:
        return self.next_payment_date is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary (cart identity excluded)."""
        return {
            'key': self.key,
            'start_date': _iso(self.start_date),
            'trial_end_date': _iso(self.trial_end_date),
            'next_payment_date': _iso(self.next_payment_date),
            'end_date': _iso(self.end_date),
            'items': self.item_keys,
            'fees': [{'id': fee.id, 'total': str(fee.total), 'tax': str(fee.tax)} for fee in self.cart.fees],
            'totals': self.cart.totals_dict(),
        }
