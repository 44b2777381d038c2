"""
Totals aggregator.

Orchestrates one full cart totalization: the initial pass, grouping of
subscription items by billing schedule, one recurring pass per group and
the reconciliation of the initial payment total.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Optional

from ...domain.entities import Cart, RecurringCartSnapshot, utc_now
from ...domain.services import (
    AggregationStage,
    CalculationMode,
    ScheduleGrouper,
    ShippingPolicy,
    TotalizationContext,
)
from ...domain.value_objects import ZERO, round_amount
from .hooks import HookPoint, TotalsHooks
from .recurring_cart_builder import RecurringCartBuilder
from .shipping_calculator import ShippingFormInput
from .totals_pass import TotalsPass

logger = logging.getLogger(__name__)


class TotalsAggregator:
    """
    Drives the totalization state machine of a cart.

    Stages run in a fixed order: INITIAL_PASS, GROUPING, PER_GROUP_PASS,
    RECONCILIATION, back to IDLE. The context's mode is NONE again when
    control returns, whether the totalization succeeded or raised.
    """

    def __init__(
        self,
        totals_pass: TotalsPass,
        grouper: ScheduleGrouper,
        builder: RecurringCartBuilder,
        policy: ShippingPolicy,
        hooks: TotalsHooks,
        decimals: int = 2,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._pass = totals_pass
        self._grouper = grouper
        self._builder = builder
        self._policy = policy
        self._hooks = hooks
        self._decimals = decimals
        self._clock = clock

    def calculate_totals(
        self,
        cart: Cart,
        context: TotalizationContext,
        form: Optional[ShippingFormInput] = None,
    ) -> Decimal:
        """
        Totalize ``cart`` and replace its recurring cart snapshots.

        A call made while a totalization of the same context is in flight
        (e.g. from a hook) does nothing and returns the in-flight total.

        Args:
            cart: Cart to totalize
            context: The cart's totalization context
            form: Optional shipping calculator submission

        Returns:
            Initial payment total

        Raises:
            InvalidCartStateException: If a recurring cart cannot be built;
                the previous total and snapshots are kept
        """
        if context.in_progress:
            logger.debug(
                "Totalization of cart %s already in progress (stage %s); skipping",
                cart.id, context.stage.value
            )
            return cart.total

        previous_total = cart.total
        previous_recurring = cart.recurring_carts
        context.now = self._clock()

        try:
            context.stage = AggregationStage.INITIAL_PASS
            self._hooks.do_action(HookPoint.BEFORE_CALCULATE_TOTALS, cart, context)
            total = self._totalize(cart, context, form)
            self._hooks.do_action(HookPoint.AFTER_CALCULATE_TOTALS, cart, context)
        except Exception:
            cart.total = previous_total
            cart.recurring_carts = previous_recurring
            logger.exception("Totalization of cart %s failed", cart.id)
            raise
        finally:
            context.reset()

        return total

    def _totalize(
        self,
        cart: Cart,
        context: TotalizationContext,
        form: Optional[ShippingFormInput],
    ) -> Decimal:
        context.set(CalculationMode.NONE)
        self._pass.shipping.maybe_recalculate_shipping(cart, form)
        self._pass.run(cart, context)

        if not cart.contains_subscription:
            cart.recurring_carts = {}
            return cart.total

        context.stage = AggregationStage.GROUPING
        self._hooks.do_action(HookPoint.BEFORE_GROUPING, cart, context)
        groups = self._grouper.group(cart, now=context.now)
        self._hooks.do_action(HookPoint.AFTER_GROUPING, cart, groups, context)

        context.stage = AggregationStage.PER_GROUP_PASS
        recurring: Dict[str, RecurringCartSnapshot] = {}
        with context.using(CalculationMode.RECURRING_TOTAL):
            for schedule_key, item_keys in groups.items():
                recurring[schedule_key] = self._builder.build(cart, item_keys, schedule_key, context)

        context.stage = AggregationStage.RECONCILIATION
        total = self._reconcile(cart, context)
        cart.recurring_carts = recurring

        logger.info(
            "Cart %s totalized: initial %s, %d recurring cart(s)",
            cart.id, total, len(recurring)
        )
        return total

    def _reconcile(self, cart: Cart, context: TotalizationContext) -> Decimal:
        """Recalculate the initial payment total after the recurring passes."""
        # Recurring passes reset the shared shipping state
        self._pass.shipping.maybe_restore_chosen_shipping_methods()
        self._pass.shipping.calculate(cart, context)

        if self._policy.sign_up_fee_total(cart) == 0 and self._policy.all_items_have_free_trial(cart):
            cart.zero_fees()

        total = max(ZERO, round_amount(cart.raw_total(), self._decimals))

        if cart.discount_total != 0:
            total = max(ZERO, round_amount(total - cart.discount_total, self._decimals))

        if not self._policy.charge_shipping_up_front(cart):
            total = max(ZERO, total - cart.shipping_tax_total - cart.shipping_total)
            cart.zero_shipping()

        cart.total = self._hooks.apply_filters(HookPoint.CALCULATED_TOTAL, total, cart, context)
        return cart.total
