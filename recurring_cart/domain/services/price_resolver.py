"""
Price Resolver Domain Service.

Decides which price of a line item the totals arithmetic should use for
the pass currently running.
"""
from decimal import Decimal
from typing import Callable

from ..entities.cart import LineItem
from .calculation_mode import CalculationMode
from .terms_resolver import effective_terms

PriceSource = Callable[[LineItem], Decimal]


class PriceResolver:
    """
    Maps (line item, calculation mode) to the unit price used in totals.

    - Simple products cost their catalog price, except on renewals where
      they cost nothing (they are bought once).
    - Subscriptions on the initial payment cost the sign-up fee plus the
      first period, or only the sign-up fee while a free trial runs.
    - Subscriptions in every other mode cost the recurring price; the
      sign-up fee is a one-time charge.
    """

    def resolve(self, item: LineItem, mode: CalculationMode) -> Decimal:
        """
        Resolve the unit price for an item.

        Args:
            item: Cart line item
            mode: Active calculation mode

        Returns:
            Unit price for this pass
        """
        price = item.product.price

        if not item.is_subscription:
            if mode == CalculationMode.RECURRING_TOTAL:
                return Decimal("0")
            return price

        if mode == CalculationMode.NONE:
            terms = effective_terms(item)
            if terms.trial_length > 0:
                return terms.sign_up_fee
            return price + terms.sign_up_fee

        return price

    def price_source(self, mode: CalculationMode) -> PriceSource:
        """Bind a mode, returning the one-argument callable the arithmetic engine expects."""
        def source(item: LineItem) -> Decimal:
            return self.resolve(item, mode)

        return source
