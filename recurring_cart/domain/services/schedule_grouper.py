"""
Billing Schedule Grouper Domain Service.

Groups subscription items that renew together so that shipping and other
per-order amounts can be calculated for each renewal.
"""
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..entities.base import utc_now
from ..entities.cart import Cart, LineItem
from ..exceptions import InvalidCartStateException
from ..value_objects import SubscriptionTerms
from .subscription_dates import first_renewal_payment_date
from .terms_resolver import effective_terms

RenewalDateProvider = Callable[[LineItem, SubscriptionTerms, datetime], Optional[datetime]]


def _terms_renewal_date(item: LineItem, terms: SubscriptionTerms, now: datetime) -> Optional[datetime]:
    return first_renewal_payment_date(terms, now)


class ScheduleGrouper:
    """
    Derives billing schedule keys and partitions cart items by them.

    Keys are built from the effective terms only, so grouping is pure:
    the same cart grouped twice yields the same keys in the same order.
    Synchronized items are prefixed with their first renewal date, which
    keeps items with different sync anniversaries in separate groups.
    """

    def __init__(self, renewal_date_provider: Optional[RenewalDateProvider] = None):
        self._renewal_date = renewal_date_provider or _terms_renewal_date

    def schedule_key(
        self,
        item: LineItem,
        renewal_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """
        Build the schedule key of a subscription item.

        Args:
            item: Subscription line item
            renewal_date: Explicit first renewal date; wins over the derived one
            now: Reference time for synchronized renewal dates

        Returns:
            Schedule key, e.g. ``monthly_after_a_14_day_trial``

        Raises:
            InvalidCartStateException: If the item is not a subscription
        """
        terms = effective_terms(item)
        if terms is None:
            raise InvalidCartStateException(
                message=f"Line item '{item.key}' is not a subscription",
                item_key=item.key,
                product_id=item.product.id,
            )

        if renewal_date is None and terms.is_synchronized:
            renewal_date = self._renewal_date(item, terms, now or utc_now())

        return terms.schedule_key(renewal_date)

    def group(self, cart: Cart, now: Optional[datetime] = None) -> Dict[str, List[str]]:
        """
        Partition subscription items by schedule key.

        Non-subscription items are never grouped.

        Returns:
            Mapping of schedule key to item keys, in cart order
        """
        now = now or utc_now()
        groups: Dict[str, List[str]] = {}
        for item_key, item in cart.items.items():
            if not item.is_subscription:
                continue
            groups.setdefault(self.schedule_key(item, now=now), []).append(item_key)
        return groups
