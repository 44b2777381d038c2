"""
Recurring cart builder.

Turns one billing schedule group of a cart into the snapshot of what is
charged on each renewal of that schedule.
"""
import logging
from dataclasses import replace
from typing import Iterable

from ...domain.entities import Cart, LineItem, Product, RecurringCartSnapshot, utc_now
from ...domain.exceptions import EntityNotFoundException, InvalidCartStateException
from ...domain.services import CalculationMode, TotalizationContext, effective_terms
from ..interfaces import SubscriptionCatalog
from .totals_pass import TotalsPass

logger = logging.getLogger(__name__)


class RecurringCartBuilder:
    """Builds recurring cart snapshots from a totalized base cart."""

    def __init__(self, catalog: SubscriptionCatalog, totals_pass: TotalsPass):
        self._catalog = catalog
        self._pass = totals_pass

    def build(
        self,
        base_cart: Cart,
        item_keys: Iterable[str],
        schedule_key: str,
        context: TotalizationContext,
    ) -> RecurringCartSnapshot:
        """
        Build the recurring snapshot of one schedule group.

        Args:
            base_cart: Cart after its initial pass; left untouched
            item_keys: Keys of the items in this group
            schedule_key: Key the group was formed under
            context: Totalization context of the base cart

        Returns:
            Snapshot with dates taken from the group's first item

        Raises:
            InvalidCartStateException: If the group is empty or its first
                item's product cannot be resolved
        """
        recurring = base_cart.clone(keep=item_keys)
        if recurring.is_empty:
            raise InvalidCartStateException(
                message=f"Schedule group '{schedule_key}' has no items",
            )

        # Fees are charged on the initial order only
        recurring.fees = []

        first = next(iter(recurring.items.values()))
        product = self._resolve_product(first)
        start = context.now or utc_now()

        trial_end = self._catalog.get_trial_expiration_date(product, start)
        next_payment = self._catalog.get_first_renewal_payment_date(product, start)
        end = self._catalog.get_expiration_date(product, start)

        self._pass.shipping.reset_shipping()
        self._pass.shipping.maybe_restore_chosen_shipping_methods()

        if context.mode == CalculationMode.RECURRING_TOTAL:
            self._pass.run(recurring, context)
        else:
            with context.using(CalculationMode.RECURRING_TOTAL):
                self._pass.run(recurring, context)

        recurring.strip_transient()

        logger.debug(
            "Built recurring cart '%s' for cart %s: %d item(s), total %s",
            schedule_key, base_cart.id, len(recurring.items), recurring.total
        )

        return RecurringCartSnapshot(
            key=schedule_key,
            start_date=start,
            trial_end_date=trial_end,
            next_payment_date=next_payment,
            end_date=end,
            cart=recurring,
        )

    def _resolve_product(self, item: LineItem) -> Product:
        """Catalog product as seen by this cart row, item overrides applied."""
        try:
            product = self._catalog.get_product(item.product.id)
        except EntityNotFoundException as e:
            raise InvalidCartStateException(
                message=f"Product of line item '{item.key}' could not be resolved",
                item_key=item.key,
                product_id=item.product.id,
            ) from e

        return replace(product, terms=effective_terms(replace(item, product=product)))
